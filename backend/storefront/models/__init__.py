"""
SQLAlchemy models for the storefront directory subsystem.
"""
from storefront.models.tenant import Tenant, TenantBusinessProfile, LocationStatus
from storefront.models.category import TenantCategory
from storefront.models.inventory import InventoryItem, ItemStatus, ItemVisibility
from storefront.models.promotion import ListingPromotion, PromotionTier

__all__ = [
    "Tenant",
    "TenantBusinessProfile",
    "LocationStatus",
    "TenantCategory",
    "InventoryItem",
    "ItemStatus",
    "ItemVisibility",
    "ListingPromotion",
    "PromotionTier",
]
