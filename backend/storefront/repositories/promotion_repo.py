"""
Listing promotion repository.
"""
from datetime import datetime
from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models import ListingPromotion
from storefront.repositories.base import BaseRepository

COUNTER_COLUMNS = ("impressions", "clicks")


class PromotionRepository(BaseRepository[ListingPromotion]):
    """Reads and writes ListingPromotion rows."""

    def __init__(self, db: AsyncSession):
        super().__init__(ListingPromotion, db)

    async def get_for_listing(
        self,
        listing_id: int,
        *,
        for_update: bool = False,
    ) -> ListingPromotion | None:
        query = select(ListingPromotion).where(ListingPromotion.listing_id == listing_id)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def increment_counter(self, listing_id: int, counter: str) -> bool:
        """
        Add one to a counter of a currently promoted listing.

        The increment happens in SQL so concurrent callers never lose counts.

        Returns:
            True if a promoted row was updated, False otherwise
        """
        if counter not in COUNTER_COLUMNS:
            raise ValueError(f"Unknown promotion counter: {counter}")
        column = getattr(ListingPromotion, counter)
        result = await self.db.execute(
            update(ListingPromotion)
            .where(
                ListingPromotion.listing_id == listing_id,
                ListingPromotion.is_promoted == True,  # noqa: E712
            )
            .values({counter: column + 1})
        )
        return result.rowcount > 0

    async def lock_expired(self, now: datetime) -> Sequence[ListingPromotion]:
        """
        Lock and return promoted rows whose expiry is at or before ``now``.

        Promotions without an expiry are never returned.
        """
        result = await self.db.execute(
            select(ListingPromotion)
            .where(
                ListingPromotion.is_promoted == True,  # noqa: E712
                ListingPromotion.expires_at.is_not(None),
                ListingPromotion.expires_at <= now,
            )
            .order_by(ListingPromotion.id)
            .with_for_update()
        )
        return result.scalars().all()

    async def clear_promotions(self, promotion_ids: list[int]) -> int:
        """
        Move promotions back to the not-promoted state.

        ``ended_at`` keeps the old expiry; counters are left untouched.

        Returns:
            Number of rows cleared
        """
        if not promotion_ids:
            return 0
        result = await self.db.execute(
            update(ListingPromotion)
            .where(
                ListingPromotion.id.in_(promotion_ids),
                ListingPromotion.is_promoted == True,  # noqa: E712
            )
            .values(
                is_promoted=False,
                tier=None,
                started_at=None,
                ended_at=ListingPromotion.expires_at,
                expires_at=None,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
