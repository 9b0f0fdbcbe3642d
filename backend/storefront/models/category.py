"""
Tenant category model.

The tenant-owned taxonomy that is pushed to the external category provider.
"""
from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from storefront.db.base import Base


class TenantCategory(Base):
    """A category in a tenant's taxonomy. Slugs are unique per tenant."""

    __tablename__ = "tenant_categories"

    tenant_id: Mapped[int] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(default=0, nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "slug", name="uq_tenant_categories_tenant_slug"),
    )
