"""
Tenant category repository.
"""
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models import TenantCategory
from storefront.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[TenantCategory]):
    """Reads a tenant's taxonomy for reconciliation."""

    def __init__(self, db: AsyncSession):
        super().__init__(TenantCategory, db)

    async def list_for_tenant(
        self,
        tenant_id: int,
        *,
        active_only: bool = False,
    ) -> Sequence[TenantCategory]:
        """
        Get a tenant's categories in display order.

        Args:
            tenant_id: Owning tenant
            active_only: Skip deactivated categories
        """
        filters = {"tenant_id": tenant_id}
        if active_only:
            filters["is_active"] = True
        return await self.find_by(order_by="sort_order", **filters)
