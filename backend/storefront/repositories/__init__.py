"""
Repository layer for data access.

Repositories hide SQL and ORM details from the services.
"""
from storefront.repositories.base import BaseRepository
from storefront.repositories.category_repo import CategoryRepository
from storefront.repositories.directory_repo import DirectoryRepository
from storefront.repositories.promotion_repo import PromotionRepository
from storefront.repositories.tenant_repo import TenantRepository

__all__ = [
    "BaseRepository",
    "CategoryRepository",
    "DirectoryRepository",
    "PromotionRepository",
    "TenantRepository",
]
