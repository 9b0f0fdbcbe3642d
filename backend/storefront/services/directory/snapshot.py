"""
Directory snapshot: the immutable, read-optimized result of one refresh.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from storefront.models.promotion import PromotionTier
from storefront.services.categories.base import normalize_slug

# Higher sorts first
TIER_RANK = {
    PromotionTier.FEATURED.value: 3,
    PromotionTier.PREMIUM.value: 2,
    PromotionTier.BASIC.value: 1,
}


@dataclass(frozen=True)
class DirectoryEntry:
    """One store listed under one of its categories."""
    tenant_id: int
    store_name: str
    store_slug: str
    category_id: int
    category_slug: str
    category_name: str
    product_count: int
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    last_product_update: Optional[datetime] = None
    last_sync_at: Optional[datetime] = None
    is_promoted: bool = False
    promotion_tier: Optional[str] = None

    @property
    def promotion_rank(self) -> int:
        if not self.is_promoted or self.promotion_tier is None:
            return 0
        return TIER_RANK.get(self.promotion_tier, 0)

    def sort_key(self) -> tuple:
        return (-self.promotion_rank, self.store_name.casefold(), self.tenant_id)


@dataclass(frozen=True)
class CategoryStats:
    category_slug: str
    category_name: str
    store_count: int
    promoted_count: int
    product_count: int


@dataclass(frozen=True)
class DirectorySnapshot:
    """
    Complete entry set from a single refresh.

    Entries are stored as a tuple in promotion-aware order, so a snapshot
    never changes once published.
    """
    entries: tuple[DirectoryEntry, ...]
    generated_at: datetime
    freshness_window_hours: float
    version: int = 0
    _by_category: dict[str, tuple[DirectoryEntry, ...]] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    @classmethod
    def build(
        cls,
        entries: list[DirectoryEntry],
        generated_at: datetime,
        freshness_window_hours: float,
        version: int = 0,
    ) -> "DirectorySnapshot":
        ordered = tuple(sorted(entries, key=DirectoryEntry.sort_key))
        snapshot = cls(
            entries=ordered,
            generated_at=generated_at,
            freshness_window_hours=freshness_window_hours,
            version=version,
        )
        grouped: dict[str, list[DirectoryEntry]] = defaultdict(list)
        for entry in ordered:
            grouped[normalize_slug(entry.category_slug)].append(entry)
        snapshot._by_category.update({slug: tuple(items) for slug, items in grouped.items()})
        return snapshot

    @classmethod
    def empty(cls, generated_at: datetime, freshness_window_hours: float) -> "DirectorySnapshot":
        return cls.build([], generated_at, freshness_window_hours)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def tenant_ids(self) -> frozenset[int]:
        return frozenset(entry.tenant_id for entry in self.entries)

    def entries_for_category(self, category_slug: str) -> tuple[DirectoryEntry, ...]:
        return self._by_category.get(normalize_slug(category_slug), ())

    def entries_for_tenant(self, tenant_id: int) -> tuple[DirectoryEntry, ...]:
        return tuple(entry for entry in self.entries if entry.tenant_id == tenant_id)

    def category_stats(self) -> list[CategoryStats]:
        """Per-category store/promoted/product totals, most stores first."""
        stats = []
        for slug, entries in self._by_category.items():
            stats.append(
                CategoryStats(
                    category_slug=slug,
                    category_name=entries[0].category_name,
                    store_count=len({e.tenant_id for e in entries}),
                    promoted_count=len({e.tenant_id for e in entries if e.promotion_rank > 0}),
                    product_count=sum(e.product_count for e in entries),
                )
            )
        stats.sort(key=lambda s: (-s.store_count, s.category_slug))
        return stats
