"""
HTTP client for the external category directory.

Request and response bodies use the provider's camelCase field names; they
are translated to ProviderCategoryRecord here and nowhere else.

Status handling:
- 409 on create and 404 on delete are treated as success (already applied)
- 429, 5xx, timeouts and network errors raise TransientProviderError
- any other 4xx raises PermanentProviderError, as does a list page that is
  not a JSON object with a ``categories`` list
"""
from typing import Any, Optional
from urllib.parse import quote

import httpx
import structlog

from storefront.core.config import settings
from storefront.core.exceptions import PermanentProviderError, TransientProviderError
from storefront.services.categories.base import (
    CategoryProvider,
    ProviderCategoryRecord,
    ProviderConfig,
)

logger = structlog.get_logger()

TRANSIENT_STATUS_CODES = {408, 425, 429, 500, 502, 503, 504}


class HttpCategoryProvider(CategoryProvider):
    """
    Production category provider backed by the directory's REST API.

    The underlying httpx client is bound to the event loop it was created
    in, so create one provider per task run and ``close()`` it afterwards.
    """

    PAGE_SIZE = 100

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if config is None:
            config = ProviderConfig(
                base_url=settings.category_provider_base_url,
                api_token=settings.category_provider_api_token or None,
                timeout_seconds=settings.category_provider_timeout_seconds,
            )
        self.config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        if not self.config.api_token:
            logger.warning(
                "Category provider API token not configured. "
                "Set CATEGORY_PROVIDER_API_TOKEN environment variable."
            )

    @property
    def provider_slug(self) -> str:
        return "http"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {
                "User-Agent": self.config.user_agent,
                "Accept": "application/json",
            }
            if self.config.api_token:
                headers["Authorization"] = f"Bearer {self.config.api_token}"

            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=httpx.Timeout(self.config.timeout_seconds),
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    @staticmethod
    def _categories_path(tenant_scope: str, slug: str | None = None) -> str:
        path = f"/tenants/{quote(tenant_scope, safe='')}/categories"
        if slug is not None:
            path = f"{path}/{quote(slug, safe='')}"
        return path

    async def _request(
        self,
        method: str,
        path: str,
        *,
        ok_statuses: frozenset[int] = frozenset(),
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Make a request and classify failures.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            ok_statuses: Error statuses that mean "already applied"

        Raises:
            TransientProviderError: Retryable failure
            PermanentProviderError: Rejected request
        """
        client = await self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("Category provider timeout", method=method, path=path)
            raise TransientProviderError(f"Request timeout: {e}") from e
        except httpx.TransportError as e:
            logger.warning("Category provider network error", method=method, path=path, error=str(e))
            raise TransientProviderError(f"Network error: {e}") from e

        if response.status_code in ok_statuses:
            logger.debug(
                "Category provider reported operation already applied",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            return response

        if response.status_code in TRANSIENT_STATUS_CODES:
            raise TransientProviderError(
                f"Category provider error {response.status_code}",
                status_code=response.status_code,
            )

        if response.status_code >= 400:
            logger.error(
                "Category provider rejected request",
                method=method,
                path=path,
                status_code=response.status_code,
                error=response.text[:200],
            )
            raise PermanentProviderError(
                f"Category provider error {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        return response

    @staticmethod
    def _to_record(payload: dict[str, Any]) -> ProviderCategoryRecord:
        return ProviderCategoryRecord(
            slug=payload.get("slug", ""),
            name=payload.get("displayName", ""),
            external_id=payload.get("id") or None,
        )

    @staticmethod
    def _decode_page(response: httpx.Response) -> dict[str, Any]:
        """Parse a list page, rejecting bodies that are not a category page."""
        try:
            data = response.json()
        except ValueError as e:
            logger.error(
                "Category provider returned a non-JSON body",
                status_code=response.status_code,
                body=response.text[:200],
            )
            raise PermanentProviderError(
                f"Category provider returned invalid JSON: {e}",
                status_code=response.status_code,
            ) from e

        categories = data.get("categories", []) if isinstance(data, dict) else None
        if not isinstance(categories, list) or not all(isinstance(item, dict) for item in categories):
            logger.error(
                "Category provider returned an unexpected payload shape",
                status_code=response.status_code,
                payload_type=type(data).__name__,
            )
            raise PermanentProviderError(
                "Category provider returned an unexpected payload shape",
                status_code=response.status_code,
            )
        return {**data, "categories": categories}

    async def list_categories(self, tenant_scope: str) -> list[ProviderCategoryRecord]:
        records: list[ProviderCategoryRecord] = []
        page_token: str | None = None

        while True:
            params: dict[str, Any] = {"pageSize": self.PAGE_SIZE}
            if page_token:
                params["pageToken"] = page_token

            response = await self._request(
                "GET", self._categories_path(tenant_scope), params=params
            )
            data = self._decode_page(response)
            records.extend(
                self._to_record(item)
                for item in data["categories"]
                if item.get("slug")
            )

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return records

    async def create_category(
        self,
        tenant_scope: str,
        record: ProviderCategoryRecord,
    ) -> None:
        await self._request(
            "POST",
            self._categories_path(tenant_scope),
            json={"slug": record.slug, "displayName": record.name},
            ok_statuses=frozenset({409}),
        )

    async def update_category(
        self,
        tenant_scope: str,
        from_record: ProviderCategoryRecord,
        to_record: ProviderCategoryRecord,
    ) -> None:
        await self._request(
            "PATCH",
            self._categories_path(tenant_scope, from_record.slug),
            json={"slug": to_record.slug, "displayName": to_record.name},
        )

    async def delete_category(
        self,
        tenant_scope: str,
        record: ProviderCategoryRecord,
    ) -> None:
        await self._request(
            "DELETE",
            self._categories_path(tenant_scope, record.slug),
            ok_statuses=frozenset({404}),
        )
