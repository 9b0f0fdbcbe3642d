"""
Category reconciliation against the external category directory.

Provides the provider interface, an HTTP and an in-memory implementation,
and the reconciler that diffs a tenant's taxonomy by slug.
"""
from storefront.services.categories.base import (
    Category,
    CategoryProvider,
    ProviderCategoryRecord,
    ProviderConfig,
    normalize_slug,
)
from storefront.services.categories.http_client import HttpCategoryProvider
from storefront.services.categories.memory import InMemoryCategoryProvider
from storefront.services.categories.reconciler import (
    CategoryReconciler,
    FailedOperation,
    ReconcilePlan,
    ReconcileResult,
    plan_reconciliation,
)
from storefront.services.categories.registry import (
    available_providers,
    get_provider,
    register_provider,
)

__all__ = [
    "Category",
    "CategoryProvider",
    "ProviderCategoryRecord",
    "ProviderConfig",
    "normalize_slug",
    "HttpCategoryProvider",
    "InMemoryCategoryProvider",
    "CategoryReconciler",
    "FailedOperation",
    "ReconcilePlan",
    "ReconcileResult",
    "plan_reconciliation",
    "available_providers",
    "get_provider",
    "register_provider",
]
