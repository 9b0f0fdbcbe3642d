"""
Promotion lifecycle for directory listings.

A listing is either not promoted or promoted with a tier, a start time and
an optional expiry. Expiry is enforced only by ``sweep_expired``, which
clears every due promotion in a single transaction.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional, Sequence

import structlog
from sqlalchemy.ext.asyncio import async_sessionmaker

from storefront.core.config import settings
from storefront.core.data_freshness import ensure_utc, utcnow
from storefront.core.exceptions import (
    InvalidDurationError,
    InvalidTierError,
    ListingNotFoundError,
)
from storefront.db.transaction import atomic, read_only
from storefront.models import ListingPromotion
from storefront.repositories import PromotionRepository, TenantRepository

logger = structlog.get_logger()


@dataclass(frozen=True)
class PromotionStatus:
    """Point-in-time view of a listing's promotion."""
    listing_id: int
    is_promoted: bool
    tier: Optional[str] = None
    started_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    impressions: int = 0
    clicks: int = 0

    @classmethod
    def from_model(cls, promotion: ListingPromotion) -> "PromotionStatus":
        return cls(
            listing_id=promotion.listing_id,
            is_promoted=promotion.is_promoted,
            tier=promotion.tier,
            started_at=ensure_utc(promotion.started_at),
            expires_at=ensure_utc(promotion.expires_at),
            ended_at=ensure_utc(promotion.ended_at),
            impressions=promotion.impressions,
            clicks=promotion.clicks,
        )

    @classmethod
    def not_promoted(cls, listing_id: int) -> "PromotionStatus":
        return cls(listing_id=listing_id, is_promoted=False)

    @property
    def state(self) -> str:
        return "promoted" if self.is_promoted else "not_promoted"

    @property
    def click_through_rate(self) -> Optional[float]:
        if not self.impressions:
            return None
        return round(self.clicks / self.impressions, 4)

    def remaining(self, now: datetime) -> Optional[timedelta]:
        """Time left before expiry, None if not promoted or open-ended."""
        if not self.is_promoted or self.expires_at is None:
            return None
        return max(self.expires_at - ensure_utc(now), timedelta(0))


class PromotionLifecycleManager:
    """
    Promote listings, count engagement and expire promotions.

    Args:
        session_maker: Factory for database sessions.
        clock: Returns the current time; used for ``started_at``.
        allowed_tiers: Tier names accepted by ``promote``. Defaults to
            ``settings.promotion_tiers``.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker,
        clock: Callable[[], datetime] = utcnow,
        allowed_tiers: Optional[Sequence[str]] = None,
    ):
        self.session_maker = session_maker
        self.clock = clock
        tiers = settings.promotion_tiers if allowed_tiers is None else allowed_tiers
        self.allowed_tiers = [t.strip().lower() for t in tiers]

    def validate_tier(self, tier: object) -> str:
        value = tier.value if isinstance(tier, Enum) else tier
        if not isinstance(value, str) or value.strip().lower() not in self.allowed_tiers:
            raise InvalidTierError(tier, self.allowed_tiers)
        return value.strip().lower()

    @staticmethod
    def validate_duration(duration: object) -> timedelta:
        if not isinstance(duration, timedelta) or duration <= timedelta(0):
            raise InvalidDurationError(duration)
        return duration

    async def promote(
        self,
        listing_id: int,
        tier: object,
        duration: timedelta,
    ) -> PromotionStatus:
        """
        Start (or restart) a promotion.

        Starts now and expires after ``duration``. Impression and click
        counters are reset. Promoting an already promoted listing starts a
        fresh promotion.

        Raises:
            InvalidTierError: Tier is not one of the allowed tiers
            InvalidDurationError: Duration is not a positive timedelta
            ListingNotFoundError: No such listing
        """
        tier_name = self.validate_tier(tier)
        duration = self.validate_duration(duration)

        async with self.session_maker() as db:
            async with atomic(db):
                if await TenantRepository(db).get_by_id(listing_id) is None:
                    raise ListingNotFoundError(listing_id)

                repo = PromotionRepository(db)
                promotion = await repo.get_for_listing(listing_id, for_update=True)
                now = ensure_utc(self.clock())
                values = {
                    "is_promoted": True,
                    "tier": tier_name,
                    "started_at": now,
                    "expires_at": now + duration,
                    "ended_at": None,
                    "impressions": 0,
                    "clicks": 0,
                }

                if promotion is None:
                    promotion = await repo.create(listing_id=listing_id, **values)
                else:
                    if promotion.is_promoted:
                        logger.info(
                            "Re-initiating active promotion",
                            listing_id=listing_id,
                            previous_tier=promotion.tier,
                        )
                    for key, value in values.items():
                        setattr(promotion, key, value)
                    await db.flush()

                status = PromotionStatus.from_model(promotion)

        logger.info(
            "Listing promoted",
            listing_id=listing_id,
            tier=tier_name,
            expires_at=status.expires_at.isoformat() if status.expires_at else None,
        )
        return status

    async def _increment(self, listing_id: int, counter: str) -> bool:
        async with self.session_maker() as db:
            async with atomic(db):
                counted = await PromotionRepository(db).increment_counter(listing_id, counter)
        if not counted:
            logger.debug("Ignored counter for listing without active promotion", listing_id=listing_id, counter=counter)
        return counted

    async def record_impression(self, listing_id: int) -> bool:
        """Count an impression. Returns False (and does nothing) if not promoted."""
        return await self._increment(listing_id, "impressions")

    async def record_click(self, listing_id: int) -> bool:
        """Count a click. Returns False (and does nothing) if not promoted."""
        return await self._increment(listing_id, "clicks")

    async def get_status(self, listing_id: int) -> PromotionStatus:
        """
        Raises:
            ListingNotFoundError: No such listing
        """
        async with read_only(self.session_maker) as db:
            if await TenantRepository(db).get_by_id(listing_id) is None:
                raise ListingNotFoundError(listing_id)
            promotion = await PromotionRepository(db).get_for_listing(listing_id)
            if promotion is None:
                return PromotionStatus.not_promoted(listing_id)
            return PromotionStatus.from_model(promotion)

    async def sweep_expired(self, now: Optional[datetime] = None) -> int:
        """
        Clear every promotion whose expiry is at or before ``now``.

        Scan and clear run in one transaction with the rows locked, so a
        promotion is either fully cleared or untouched. Counters are kept.

        Returns:
            Number of promotions transitioned to not promoted
        """
        now = ensure_utc(now if now is not None else self.clock())

        async with self.session_maker() as db:
            async with atomic(db):
                repo = PromotionRepository(db)
                expired = await repo.lock_expired(now)
                cleared = await repo.clear_promotions([p.id for p in expired])

        if cleared:
            logger.info("Expired promotions cleared", count=cleared, now=now.isoformat())
        else:
            logger.debug("No expired promotions", now=now.isoformat())
        return cleared
