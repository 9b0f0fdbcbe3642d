"""
Category reconciliation against the external category provider.

Diffs a tenant's desired taxonomy against what the provider currently
reports and applies the smallest set of create/update/delete calls.

Matching is by normalized slug only. Provider ids are opaque and may be
regenerated between passes, so they never take part in the diff.

Operations are applied creates first, then updates, then deletes, so a
rename expressed as create+delete never leaves a window with neither
category present. Each operation is attempted on its own: one failure is
recorded in the result and the rest of the batch still runs.
"""
import asyncio
import weakref
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable

import structlog

from storefront.core.exceptions import PermanentProviderError, TransientProviderError
from storefront.core.retry import RetryPolicy, retry_async
from storefront.services.categories.base import (
    Category,
    CategoryProvider,
    ProviderCategoryRecord,
    normalize_slug,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class FailedOperation:
    """A single provider call that did not go through."""
    action: str  # create, update, delete, list, validate
    slug: str
    error: str
    transient: bool = False


@dataclass
class ReconcileResult:
    """Complete accounting of one reconciliation pass."""
    tenant_scope: str
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    failed: list[FailedOperation] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.created) + len(self.updated) + len(self.deleted)

    @property
    def has_changes(self) -> bool:
        return bool(self.created or self.updated or self.deleted)

    @property
    def is_empty(self) -> bool:
        """True when nothing was applied and nothing failed."""
        return not self.has_changes and not self.failed

    def failed_slugs(self, action: str | None = None) -> list[str]:
        return [f.slug for f in self.failed if action is None or f.action == action]

    def to_dict(self) -> dict[str, Any]:
        return {
            "tenant_scope": self.tenant_scope,
            "created": list(self.created),
            "updated": list(self.updated),
            "deleted": list(self.deleted),
            "unchanged": len(self.unchanged),
            "failed": [
                {
                    "action": f.action,
                    "slug": f.slug,
                    "error": f.error,
                    "transient": f.transient,
                }
                for f in self.failed
            ],
        }


@dataclass
class ReconcilePlan:
    """The diff between desired and provider state, before anything is applied."""
    creates: list[ProviderCategoryRecord] = field(default_factory=list)
    updates: list[tuple[ProviderCategoryRecord, ProviderCategoryRecord]] = field(default_factory=list)
    deletes: list[ProviderCategoryRecord] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    invalid: list[FailedOperation] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.creates or self.updates or self.deletes)


def plan_reconciliation(
    tenant_scope: str,
    desired: Iterable[Category],
    current: Iterable[ProviderCategoryRecord],
) -> ReconcilePlan:
    """
    Classify every slug as create, update, delete or unchanged.

    Inactive desired categories count as absent, so they are deleted from
    the provider. When two entries normalize to the same slug the first one
    wins.

    Args:
        tenant_scope: Scope being reconciled; desired categories from another
            scope are rejected as invalid.
        desired: The tenant's taxonomy.
        current: Records the provider reported in this pass.
    """
    plan = ReconcilePlan()

    wanted: dict[str, Category] = {}
    for category in desired:
        slug = normalize_slug(category.slug)
        if not slug:
            logger.warning("Desired category has an empty slug", tenant_scope=tenant_scope, name=category.name)
            plan.invalid.append(
                FailedOperation(action="validate", slug=category.slug, error="empty slug")
            )
            continue
        if category.tenant_scope != tenant_scope:
            plan.invalid.append(
                FailedOperation(
                    action="validate",
                    slug=slug,
                    error=f"category belongs to scope {category.tenant_scope!r}",
                )
            )
            continue
        if not category.active:
            continue
        if slug in wanted:
            logger.warning("Duplicate desired category slug ignored", tenant_scope=tenant_scope, slug=slug)
            continue
        wanted[slug] = category

    existing: dict[str, ProviderCategoryRecord] = {}
    for record in current:
        slug = normalize_slug(record.slug)
        if slug in existing:
            logger.warning("Duplicate provider category slug ignored", tenant_scope=tenant_scope, slug=slug)
            continue
        existing[slug] = record

    for slug, category in wanted.items():
        record = existing.get(slug)
        if record is None:
            plan.creates.append(ProviderCategoryRecord(slug=slug, name=category.name))
        elif record.name != category.name:
            plan.updates.append(
                (
                    record,
                    ProviderCategoryRecord(
                        slug=slug,
                        name=category.name,
                        external_id=record.external_id,
                    ),
                )
            )
        else:
            plan.unchanged.append(slug)

    for slug, record in existing.items():
        if slug not in wanted:
            plan.deletes.append(record)

    return plan


class CategoryReconciler:
    """
    Pushes a tenant's desired taxonomy to a CategoryProvider.

    Reconciles for the same tenant scope are serialized by a per-scope lock;
    different scopes run independently.

    Usage:
        reconciler = CategoryReconciler(provider)
        result = await reconciler.reconcile("tenant-42", desired_categories)
        if result.failed:
            ...
    """

    def __init__(
        self,
        provider: CategoryProvider,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.provider = provider
        self.retry_policy = retry_policy or RetryPolicy.from_settings()
        self._sleep = sleep
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, tenant_scope: str) -> asyncio.Lock:
        # Entries vanish once no reconcile holds or waits on the lock.
        lock = self._locks.get(tenant_scope)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[tenant_scope] = lock
        return lock

    async def reconcile(
        self,
        tenant_scope: str,
        desired: Iterable[Category],
    ) -> ReconcileResult:
        """
        Bring the provider in line with ``desired`` for one tenant.

        Never raises for provider failures; they are reported in
        ``ReconcileResult.failed``. Cancellation propagates and leaves
        whatever was already applied, which the next pass picks up.
        """
        desired = list(desired)
        lock = self._lock_for(tenant_scope)
        async with lock:
            return await self._reconcile_locked(tenant_scope, desired)

    async def _reconcile_locked(
        self,
        tenant_scope: str,
        desired: list[Category],
    ) -> ReconcileResult:
        result = ReconcileResult(tenant_scope=tenant_scope)
        log = logger.bind(tenant_scope=tenant_scope, provider=self.provider.provider_slug)

        try:
            current = await retry_async(
                lambda: self.provider.list_categories(tenant_scope),
                self.retry_policy,
                sleep=self._sleep,
                tenant_scope=tenant_scope,
                action="list",
            )
        except (TransientProviderError, PermanentProviderError) as e:
            log.error("Could not list provider categories, nothing applied", error=str(e))
            result.failed.append(
                FailedOperation(
                    action="list",
                    slug="*",
                    error=str(e),
                    transient=isinstance(e, TransientProviderError),
                )
            )
            return result
        except Exception as e:
            log.exception("Unexpected error listing provider categories, nothing applied")
            result.failed.append(
                FailedOperation(action="list", slug="*", error=f"{type(e).__name__}: {e}")
            )
            return result

        plan = plan_reconciliation(tenant_scope, desired, current)
        result.unchanged.extend(plan.unchanged)
        result.failed.extend(plan.invalid)

        log.info(
            "Reconciling categories",
            creates=len(plan.creates),
            updates=len(plan.updates),
            deletes=len(plan.deletes),
            unchanged=len(plan.unchanged),
        )

        for record in plan.creates:
            await self._apply(
                result,
                "create",
                record.slug,
                lambda r=record: self.provider.create_category(tenant_scope, r),
            )

        for from_record, to_record in plan.updates:
            await self._apply(
                result,
                "update",
                to_record.slug,
                lambda f=from_record, t=to_record: self.provider.update_category(tenant_scope, f, t),
            )

        for record in plan.deletes:
            await self._apply(
                result,
                "delete",
                normalize_slug(record.slug),
                lambda r=record: self.provider.delete_category(tenant_scope, r),
            )

        log.info(
            "Category reconciliation finished",
            created=len(result.created),
            updated=len(result.updated),
            deleted=len(result.deleted),
            failed=len(result.failed),
        )
        return result

    async def _apply(
        self,
        result: ReconcileResult,
        action: str,
        slug: str,
        operation: Callable[[], Awaitable[None]],
    ) -> None:
        try:
            await retry_async(
                operation,
                self.retry_policy,
                sleep=self._sleep,
                tenant_scope=result.tenant_scope,
                action=action,
                slug=slug,
            )
        except TransientProviderError as e:
            result.failed.append(FailedOperation(action, slug, str(e), transient=True))
        except PermanentProviderError as e:
            logger.warning(
                "Provider rejected category operation, skipping",
                tenant_scope=result.tenant_scope,
                action=action,
                slug=slug,
                error=str(e),
            )
            result.failed.append(FailedOperation(action, slug, str(e)))
        except Exception as e:
            logger.exception(
                "Unexpected error applying category operation",
                tenant_scope=result.tenant_scope,
                action=action,
                slug=slug,
            )
            result.failed.append(FailedOperation(action, slug, f"{type(e).__name__}: {e}"))
        else:
            {"create": result.created, "update": result.updated, "delete": result.deleted}[action].append(slug)
