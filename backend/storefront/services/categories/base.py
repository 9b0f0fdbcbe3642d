"""
Base classes for category providers.

Defines the interface that every category provider (the external category
directory a tenant's taxonomy is pushed to) must implement.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


def normalize_slug(slug: str) -> str:
    """Canonical slug form used as the matching key: trimmed and case-folded."""
    return slug.strip().casefold()


@dataclass(frozen=True)
class Category:
    """A category in a tenant's desired taxonomy."""
    tenant_scope: str
    slug: str
    name: str
    active: bool = True


@dataclass(frozen=True)
class ProviderCategoryRecord:
    """
    A category as reported by the provider for one reconciliation pass.

    ``external_id`` is opaque: it may be missing or regenerated between
    passes and is never used as a matching key.
    """
    slug: str
    name: str
    external_id: str | None = None


@dataclass
class ProviderConfig:
    """Configuration for a category provider."""
    base_url: str
    api_token: str | None = None
    timeout_seconds: float = 15.0
    user_agent: str = "StorefrontDirectory/1.0"
    extra: dict[str, Any] = field(default_factory=dict)


class CategoryProvider(ABC):
    """
    Abstract base class for category providers.

    Every operation is scoped to a tenant and must be safe to retry:
    creating a slug that already exists and deleting a slug that is absent
    are no-ops, not errors.

    Implementations raise TransientProviderError for failures worth
    retrying and PermanentProviderError for rejected payloads.
    """

    @property
    @abstractmethod
    def provider_slug(self) -> str:
        """Return the provider slug (lowercase, no spaces)."""
        pass

    @abstractmethod
    async def list_categories(self, tenant_scope: str) -> list[ProviderCategoryRecord]:
        """
        Fetch the provider's current categories for a tenant.

        Args:
            tenant_scope: Tenant boundary for slug uniqueness.

        Returns:
            List of ProviderCategoryRecord objects.
        """
        pass

    @abstractmethod
    async def create_category(
        self,
        tenant_scope: str,
        record: ProviderCategoryRecord,
    ) -> None:
        """Create a category. No-op if the slug already exists."""
        pass

    @abstractmethod
    async def update_category(
        self,
        tenant_scope: str,
        from_record: ProviderCategoryRecord,
        to_record: ProviderCategoryRecord,
    ) -> None:
        """Replace ``from_record`` with ``to_record`` (same slug, new name)."""
        pass

    @abstractmethod
    async def delete_category(
        self,
        tenant_scope: str,
        record: ProviderCategoryRecord,
    ) -> None:
        """Delete a category. No-op if the slug is absent."""
        pass

    async def close(self) -> None:
        """Release any network resources held by the provider."""
        return None
