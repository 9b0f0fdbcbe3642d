"""
Category reconciliation tasks.

``reconcile_all_tenant_categories`` fans out one task per sync-enabled
tenant. Runs for the same tenant are serialized across workers with a
Redis lock; runs for different tenants proceed in parallel.
"""
from typing import Any

import structlog
from celery import shared_task

from storefront.db.transaction import read_only
from storefront.models import Tenant
from storefront.repositories import CategoryRepository, TenantRepository
from storefront.services.categories import Category, CategoryReconciler, get_provider
from storefront.tasks.utils import create_task_session_maker, run_async, single_instance

logger = structlog.get_logger()


def tenant_scope_for(tenant: Tenant) -> str:
    """Provider scope for a tenant. The id is used because slugs can change."""
    return str(tenant.id)


@shared_task
@single_instance(lambda tenant_id: f"reconcile_categories:{tenant_id}")
def reconcile_tenant_categories(tenant_id: int) -> dict[str, Any]:
    """Push one tenant's taxonomy to the category provider."""
    return run_async(_reconcile_tenant_categories_async(tenant_id))


async def _reconcile_tenant_categories_async(tenant_id: int) -> dict[str, Any]:
    session_maker, engine = create_task_session_maker()
    provider = get_provider()
    try:
        async with read_only(session_maker) as db:
            tenant = await TenantRepository(db).get_by_id(tenant_id)
            if tenant is None:
                logger.warning("Tenant not found, skipping category reconcile", tenant_id=tenant_id)
                return {"status": "not_found", "tenant_id": tenant_id}

            scope = tenant_scope_for(tenant)
            rows = await CategoryRepository(db).list_for_tenant(tenant_id)
            desired = [
                Category(
                    tenant_scope=scope,
                    slug=row.slug,
                    name=row.name,
                    active=row.is_active,
                )
                for row in rows
            ]

        result = await CategoryReconciler(provider).reconcile(scope, desired)
        return {
            "status": "partial" if result.failed else "ok",
            "tenant_id": tenant_id,
            **result.to_dict(),
        }
    finally:
        await provider.close()
        await engine.dispose()


@shared_task
def reconcile_all_tenant_categories() -> dict[str, Any]:
    """
    Queue a reconcile for every sync-enabled tenant.

    Runs every ``category_reconcile_interval_hours`` via celery beat.
    """
    tenant_ids = run_async(_list_sync_enabled_tenants())
    for tenant_id in tenant_ids:
        reconcile_tenant_categories.delay(tenant_id)
    logger.info("Queued category reconciles", tenants=len(tenant_ids))
    return {"status": "ok", "queued": len(tenant_ids)}


async def _list_sync_enabled_tenants() -> list[int]:
    session_maker, engine = create_task_session_maker()
    try:
        async with read_only(session_maker) as db:
            return await TenantRepository(db).list_sync_enabled_ids()
    finally:
        await engine.dispose()
