"""
Provider registry for category providers.

Maps the ``category_provider`` setting to a provider class. Instances are
never cached: HTTP clients are bound to the event loop they were created in,
and Celery runs each task in a fresh loop.
"""
import structlog
from typing import Type

from storefront.core.config import settings
from storefront.services.categories.base import CategoryProvider
from storefront.services.categories.http_client import HttpCategoryProvider
from storefront.services.categories.memory import InMemoryCategoryProvider

logger = structlog.get_logger()

_PROVIDER_REGISTRY: dict[str, Type[CategoryProvider]] = {
    "http": HttpCategoryProvider,
    "memory": InMemoryCategoryProvider,
}


def register_provider(slug: str, provider_class: Type[CategoryProvider]) -> None:
    """
    Register a new provider type.

    Args:
        slug: Unique identifier for the provider.
        provider_class: The provider class to register.
    """
    _PROVIDER_REGISTRY[slug] = provider_class
    logger.info("Registered category provider", slug=slug, provider=provider_class.__name__)


def available_providers() -> list[str]:
    return sorted(_PROVIDER_REGISTRY)


def get_provider(slug: str | None = None) -> CategoryProvider:
    """
    Build a new provider instance.

    Args:
        slug: Provider identifier. Defaults to ``settings.category_provider``.

    Raises:
        ValueError: If the slug is not registered.
    """
    slug = (slug or settings.category_provider).lower()
    provider_class = _PROVIDER_REGISTRY.get(slug)
    if provider_class is None:
        raise ValueError(
            f"Unknown category provider: {slug}. "
            f"Available: {', '.join(available_providers())}"
        )
    return provider_class()
