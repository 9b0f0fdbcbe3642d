"""
Inventory model for tenant products.

Only the columns the directory needs are mapped here.
"""
from enum import Enum
from typing import Optional

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from storefront.db.base import Base


class ItemStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"
    TRASHED = "trashed"
    DRAFT = "draft"


class ItemVisibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class InventoryItem(Base):
    """A product a tenant sells, optionally filed under one of its categories."""

    __tablename__ = "inventory_items"

    tenant_id: Mapped[int] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    category_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("tenant_categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    item_status: Mapped[str] = mapped_column(
        String(20),
        default=ItemStatus.ACTIVE.value,
        nullable=False
    )
    visibility: Mapped[str] = mapped_column(
        String(20),
        default=ItemVisibility.PUBLIC.value,
        nullable=False
    )

    __table_args__ = (
        Index("ix_inventory_items_directory", "tenant_id", "item_status", "visibility"),
    )
