"""
Directory and promotion Pydantic schemas.

The only place field names are translated to the camelCase used by API
consumers. Services hand over their dataclasses unchanged.
"""
from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serializes with camelCase aliases, accepts either casing on input."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class DirectoryEntryResponse(CamelModel):
    """A store listed under one category."""
    tenant_id: int
    store_name: str
    store_slug: str
    category_id: int
    category_slug: str
    category_name: str
    product_count: int

    # Location
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None

    last_product_update: Optional[datetime] = None
    last_sync_at: Optional[datetime] = None

    # Promotion
    is_promoted: bool = False
    promotion_tier: Optional[str] = None


class CategoryStatsResponse(CamelModel):
    category_slug: str
    category_name: str
    store_count: int
    promoted_count: int
    product_count: int


class DirectorySnapshotResponse(CamelModel):
    """A published snapshot, optionally narrowed to one category."""
    version: int
    generated_at: datetime
    freshness_window_hours: float
    total: int
    entries: list[DirectoryEntryResponse] = Field(default_factory=list)


class PromoteRequest(CamelModel):
    """Body of a promote call. Tier and duration are validated by the lifecycle manager."""
    tier: str
    duration_days: float = Field(description="Promotion length in days")

    @property
    def duration(self) -> timedelta:
        return timedelta(days=self.duration_days)


class PromotionStatusResponse(CamelModel):
    listing_id: int
    is_promoted: bool
    state: str
    tier: Optional[str] = None
    started_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    impressions: int = 0
    clicks: int = 0
    click_through_rate: Optional[float] = None


class FailedOperationResponse(CamelModel):
    action: str
    slug: str
    error: str
    transient: bool = False


class ReconcileResultResponse(CamelModel):
    """Outcome of one category reconciliation pass."""
    tenant_scope: str
    created: list[str] = Field(default_factory=list)
    updated: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)
    failed: list[FailedOperationResponse] = Field(default_factory=list)
    has_changes: bool = False
