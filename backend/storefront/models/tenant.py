"""
Tenant and business profile models.

A tenant's directory listing is derived from these rows; the listing id
used by promotions is the tenant id.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Float, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from storefront.db.base import Base


class LocationStatus(str, Enum):
    """Physical location lifecycle."""
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
    CLOSED = "closed"
    ARCHIVED = "archived"


class Tenant(Base):
    """
    A store on the platform.

    ``sync_enabled`` and ``last_sync_at`` track the external directory sync;
    ``directory_visible`` is the tenant's own opt-in to the public directory.
    """

    __tablename__ = "tenants"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    # Directory flags
    directory_visible: Mapped[bool] = mapped_column(default=True, nullable=False)
    location_status: Mapped[str] = mapped_column(
        String(20),
        default=LocationStatus.ACTIVE.value,
        nullable=False
    )

    # External sync tracking
    sync_enabled: Mapped[bool] = mapped_column(default=False, nullable=False)
    last_sync_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_tenants_directory_flags", "sync_enabled", "directory_visible", "location_status"),
    )


class TenantBusinessProfile(Base):
    """Name/address/geo data for a tenant's public listing."""

    __tablename__ = "tenant_business_profiles"

    tenant_id: Mapped[int] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )

    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    address_line1: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    postal_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
