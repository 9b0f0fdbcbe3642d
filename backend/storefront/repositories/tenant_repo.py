"""
Tenant repository.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models import Tenant
from storefront.repositories.base import BaseRepository


class TenantRepository(BaseRepository[Tenant]):
    """Lookups over tenants used by the scheduler entry points."""

    def __init__(self, db: AsyncSession):
        super().__init__(Tenant, db)

    async def list_sync_enabled_ids(self) -> list[int]:
        """Ids of tenants whose taxonomy is pushed to the category provider."""
        result = await self.db.execute(
            select(Tenant.id)
            .where(Tenant.sync_enabled == True)  # noqa: E712
            .order_by(Tenant.id)
        )
        return list(result.scalars().all())
