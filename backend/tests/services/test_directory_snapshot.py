"""
Tests for DirectorySnapshot read helpers.
"""
from datetime import datetime, timezone

import pytest

from storefront.services.directory import DirectoryEntry, DirectorySnapshot

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def entry(tenant_id, store_name, category_slug="books", tier=None, product_count=1):
    return DirectoryEntry(
        tenant_id=tenant_id,
        store_name=store_name,
        store_slug=store_name.lower(),
        category_id=tenant_id * 10,
        category_slug=category_slug,
        category_name=category_slug.title(),
        product_count=product_count,
        is_promoted=tier is not None,
        promotion_tier=tier,
    )


@pytest.fixture
def snapshot():
    return DirectorySnapshot.build(
        [
            entry(1, "Alpha"),
            entry(2, "Bravo", tier="basic"),
            entry(3, "Charlie", tier="featured"),
            entry(4, "Delta", tier="premium"),
            entry(5, "Echo", category_slug="games", product_count=4),
            entry(3, "Charlie", category_slug="games", tier="featured", product_count=2),
        ],
        generated_at=NOW,
        freshness_window_hours=24,
        version=7,
    )


def test_entries_ordered_by_promotion_tier_then_name(snapshot):
    assert [e.store_name for e in snapshot.entries_for_category("books")] == [
        "Charlie",
        "Delta",
        "Bravo",
        "Alpha",
    ]


def test_entries_for_category_matches_case_insensitively(snapshot):
    assert len(snapshot.entries_for_category("GAMES")) == 2
    assert snapshot.entries_for_category("toys") == ()


def test_entries_for_tenant(snapshot):
    assert [e.category_slug for e in snapshot.entries_for_tenant(3)] == ["books", "games"]


def test_category_stats(snapshot):
    stats = {s.category_slug: s for s in snapshot.category_stats()}

    assert stats["books"].store_count == 4
    assert stats["books"].promoted_count == 3
    assert stats["games"].store_count == 2
    assert stats["games"].promoted_count == 1
    assert stats["games"].product_count == 6
    assert [s.category_slug for s in snapshot.category_stats()] == ["books", "games"]


def test_unknown_tier_sorts_with_unpromoted():
    odd = entry(1, "Zulu", tier="platinum")

    assert odd.promotion_rank == 0


def test_snapshot_is_immutable(snapshot):
    with pytest.raises(AttributeError):
        snapshot.entries = ()
    assert isinstance(snapshot.entries, tuple)


def test_empty_snapshot():
    empty = DirectorySnapshot.empty(NOW, 24)

    assert len(empty) == 0
    assert empty.category_stats() == []
    assert empty.tenant_ids == frozenset()
