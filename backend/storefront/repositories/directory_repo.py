"""
Directory source repository.

Joins tenants, business profiles, inventory, categories and promotions
into one row per (tenant, category) pair. This is a pure read.
"""
from typing import Any, Sequence

from sqlalchemy import RowMapping, and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models import (
    InventoryItem,
    ItemStatus,
    ItemVisibility,
    ListingPromotion,
    LocationStatus,
    Tenant,
    TenantBusinessProfile,
    TenantCategory,
)


class DirectoryRepository:
    """
    Read-only query over the directory source tables.

    Rows are pre-filtered on the boolean/status flags so the database does
    the heavy lifting; freshness is left to the materializer because it
    depends on the refresh clock and the configured window.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def fetch_listing_rows(self) -> Sequence[RowMapping]:
        """
        Fetch candidate directory rows.

        Returns:
            Row mappings with tenant, profile, category, aggregate product
            and promotion columns.
        """
        group_columns: list[Any] = [
            Tenant.id,
            Tenant.name,
            Tenant.slug,
            Tenant.sync_enabled,
            Tenant.last_sync_at,
            Tenant.directory_visible,
            Tenant.location_status,
            TenantBusinessProfile.latitude,
            TenantBusinessProfile.longitude,
            TenantBusinessProfile.address_line1,
            TenantBusinessProfile.city,
            TenantBusinessProfile.state,
            TenantBusinessProfile.postal_code,
            TenantCategory.id,
            TenantCategory.slug,
            TenantCategory.name,
            ListingPromotion.is_promoted,
            ListingPromotion.tier,
        ]

        query = (
            select(
                Tenant.id.label("tenant_id"),
                Tenant.name.label("store_name"),
                Tenant.slug.label("store_slug"),
                Tenant.sync_enabled,
                Tenant.last_sync_at,
                Tenant.directory_visible,
                Tenant.location_status,
                TenantBusinessProfile.latitude,
                TenantBusinessProfile.longitude,
                TenantBusinessProfile.address_line1.label("address"),
                TenantBusinessProfile.city,
                TenantBusinessProfile.state,
                TenantBusinessProfile.postal_code,
                TenantCategory.id.label("category_id"),
                TenantCategory.slug.label("category_slug"),
                TenantCategory.name.label("category_name"),
                func.count(InventoryItem.id).label("product_count"),
                func.max(InventoryItem.updated_at).label("last_product_update"),
                ListingPromotion.is_promoted,
                ListingPromotion.tier.label("promotion_tier"),
            )
            .join(TenantBusinessProfile, TenantBusinessProfile.tenant_id == Tenant.id)
            .join(InventoryItem, InventoryItem.tenant_id == Tenant.id)
            .join(
                TenantCategory,
                and_(
                    TenantCategory.id == InventoryItem.category_id,
                    TenantCategory.tenant_id == Tenant.id,
                ),
            )
            .outerjoin(ListingPromotion, ListingPromotion.listing_id == Tenant.id)
            .where(
                Tenant.sync_enabled == True,  # noqa: E712
                Tenant.directory_visible == True,  # noqa: E712
                Tenant.location_status == LocationStatus.ACTIVE.value,
                InventoryItem.item_status == ItemStatus.ACTIVE.value,
                InventoryItem.visibility == ItemVisibility.PUBLIC.value,
                TenantCategory.is_active == True,  # noqa: E712
            )
            .group_by(*group_columns)
            .order_by(Tenant.id, TenantCategory.id)
        )

        result = await self.db.execute(query)
        return result.mappings().all()
