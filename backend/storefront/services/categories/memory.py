"""
In-memory category provider for testing and development.

Keeps per-instance state so every test gets an isolated provider, and takes
a pluggable id generator so runs are deterministic.
"""
import uuid
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable

from storefront.services.categories.base import (
    CategoryProvider,
    ProviderCategoryRecord,
    normalize_slug,
)


def uuid_id_generator() -> str:
    return uuid.uuid4().hex


@dataclass
class _InjectedFailure:
    error: Exception
    remaining: int


class InMemoryCategoryProvider(CategoryProvider):
    """
    Deterministic fake of the external category directory.

    Usage:
        ids = itertools.count(1)
        provider = InMemoryCategoryProvider(id_generator=lambda: f"cat-{next(ids)}")
        provider.inject_failure("create", "outdoor", TransientProviderError("boom"))
    """

    def __init__(self, id_generator: Callable[[], str] | None = None):
        self._id_generator = id_generator or uuid_id_generator
        self._categories: dict[str, dict[str, ProviderCategoryRecord]] = defaultdict(dict)
        self._failures: dict[tuple[str, str], _InjectedFailure] = {}
        self.calls: list[tuple[str, str, str]] = []

    @property
    def provider_slug(self) -> str:
        return "memory"

    def seed(self, tenant_scope: str, records: list[ProviderCategoryRecord]) -> None:
        """Preload provider state for a tenant, assigning ids where missing."""
        for record in records:
            if record.external_id is None:
                record = ProviderCategoryRecord(
                    slug=record.slug,
                    name=record.name,
                    external_id=self._id_generator(),
                )
            self._categories[tenant_scope][normalize_slug(record.slug)] = record

    def regenerate_ids(self, tenant_scope: str) -> None:
        """Simulate a provider-side reset that reissues every external id."""
        scope = self._categories[tenant_scope]
        for key, record in list(scope.items()):
            scope[key] = ProviderCategoryRecord(
                slug=record.slug,
                name=record.name,
                external_id=self._id_generator(),
            )

    def inject_failure(
        self,
        operation: str,
        slug: str,
        error: Exception,
        times: int = 1,
    ) -> None:
        """
        Make the next ``times`` calls of ``operation`` for ``slug`` raise ``error``.

        Use slug ``"*"`` with operation ``"list"`` to fail the listing call.
        """
        self._failures[(operation, normalize_slug(slug))] = _InjectedFailure(error, times)

    def snapshot(self, tenant_scope: str) -> dict[str, str]:
        """Current slug -> name mapping for a tenant."""
        return {
            record.slug: record.name
            for record in self._categories[tenant_scope].values()
        }

    def _check_failure(self, operation: str, slug: str) -> None:
        key = (operation, normalize_slug(slug))
        failure = self._failures.get(key)
        if failure is None:
            return
        failure.remaining -= 1
        if failure.remaining <= 0:
            del self._failures[key]
        raise failure.error

    async def list_categories(self, tenant_scope: str) -> list[ProviderCategoryRecord]:
        self.calls.append(("list", tenant_scope, ""))
        self._check_failure("list", "*")
        return list(self._categories[tenant_scope].values())

    async def create_category(
        self,
        tenant_scope: str,
        record: ProviderCategoryRecord,
    ) -> None:
        self.calls.append(("create", tenant_scope, record.slug))
        self._check_failure("create", record.slug)
        key = normalize_slug(record.slug)
        scope = self._categories[tenant_scope]
        if key in scope:
            return
        scope[key] = ProviderCategoryRecord(
            slug=record.slug,
            name=record.name,
            external_id=self._id_generator(),
        )

    async def update_category(
        self,
        tenant_scope: str,
        from_record: ProviderCategoryRecord,
        to_record: ProviderCategoryRecord,
    ) -> None:
        self.calls.append(("update", tenant_scope, to_record.slug))
        self._check_failure("update", to_record.slug)
        scope = self._categories[tenant_scope]
        existing = scope.pop(normalize_slug(from_record.slug), None)
        external_id = existing.external_id if existing else self._id_generator()
        scope[normalize_slug(to_record.slug)] = ProviderCategoryRecord(
            slug=to_record.slug,
            name=to_record.name,
            external_id=external_id,
        )

    async def delete_category(
        self,
        tenant_scope: str,
        record: ProviderCategoryRecord,
    ) -> None:
        self.calls.append(("delete", tenant_scope, record.slug))
        self._check_failure("delete", record.slug)
        self._categories[tenant_scope].pop(normalize_slug(record.slug), None)
