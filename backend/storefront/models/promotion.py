"""
Paid directory promotion state, one row per listing.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from storefront.db.base import Base


class PromotionTier(str, Enum):
    """Default promotion tiers, ordered from lowest to highest placement."""
    BASIC = "basic"
    PREMIUM = "premium"
    FEATURED = "featured"


class ListingPromotion(Base):
    """
    Promotion state for a directory listing.

    is_promoted is true exactly when tier and started_at are set. The
    impression/click counters survive expiry and only reset when a new
    promotion starts.
    """

    __tablename__ = "listing_promotions"

    listing_id: Mapped[int] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )

    is_promoted: Mapped[bool] = mapped_column(default=False, nullable=False)
    tier: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    ended_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    impressions: Mapped[int] = mapped_column(default=0, nullable=False)
    clicks: Mapped[int] = mapped_column(default=0, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "is_promoted = (tier IS NOT NULL AND started_at IS NOT NULL)",
            name="ck_listing_promotions_promoted_state",
        ),
        CheckConstraint(
            "expires_at IS NULL OR started_at IS NULL OR expires_at >= started_at",
            name="ck_listing_promotions_expiry_after_start",
        ),
        CheckConstraint(
            "impressions >= 0 AND clicks >= 0",
            name="ck_listing_promotions_counters",
        ),
        Index("ix_listing_promotions_expiry", "is_promoted", "expires_at"),
    )
