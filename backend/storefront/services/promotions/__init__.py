"""Paid directory promotions."""
from storefront.services.promotions.lifecycle import (
    PromotionLifecycleManager,
    PromotionStatus,
)

__all__ = ["PromotionLifecycleManager", "PromotionStatus"]
