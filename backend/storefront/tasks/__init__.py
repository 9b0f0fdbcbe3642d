"""
Celery tasks for the directory subsystem.

Includes:
- Directory refresh: rebuild the public directory snapshot
- Promotion sweep: clear expired promotions
- Category reconcile: push tenant taxonomies to the category provider
"""
from storefront.tasks.celery_app import celery_app
from storefront.tasks.categories import reconcile_all_tenant_categories, reconcile_tenant_categories
from storefront.tasks.directory import refresh_directory
from storefront.tasks.promotions import sweep_expired_promotions

__all__ = [
    "celery_app",
    "reconcile_all_tenant_categories",
    "reconcile_tenant_categories",
    "refresh_directory",
    "sweep_expired_promotions",
]
