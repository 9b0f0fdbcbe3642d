"""
Tests for data freshness helpers.
"""
from datetime import datetime, timedelta, timezone

import pytest

from storefront.core.data_freshness import (
    FreshnessWindow,
    ensure_utc,
    is_data_fresh,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
DAY = timedelta(hours=24)


def test_sync_23_hours_ago_is_fresh():
    assert is_data_fresh(NOW - timedelta(hours=23), DAY, now=NOW) is True


def test_sync_25_hours_ago_is_stale():
    assert is_data_fresh(NOW - timedelta(hours=25), DAY, now=NOW) is False


def test_exactly_at_window_boundary_is_fresh():
    assert is_data_fresh(NOW - DAY, DAY, now=NOW) is True


def test_missing_sync_is_never_fresh():
    assert is_data_fresh(None, DAY, now=NOW) is False


def test_naive_timestamps_are_treated_as_utc():
    naive = datetime(2025, 6, 1, 1, 0)

    assert ensure_utc(naive) == datetime(2025, 6, 1, 1, 0, tzinfo=timezone.utc)
    assert is_data_fresh(naive, DAY, now=NOW) is True


def test_ensure_utc_converts_other_timezones():
    plus_two = timezone(timedelta(hours=2))
    value = datetime(2025, 6, 1, 14, 0, tzinfo=plus_two)

    assert ensure_utc(value) == NOW
    assert ensure_utc(None) is None


class TestFreshnessWindow:
    def test_defaults_to_settings(self, monkeypatch):
        from storefront.core import data_freshness

        monkeypatch.setattr(data_freshness.settings, "directory_freshness_hours", 12.0)

        assert FreshnessWindow().current() == timedelta(hours=12)

    def test_explicit_hours(self):
        assert FreshnessWindow(hours=6).current() == timedelta(hours=6)

    def test_set_changes_window(self):
        window = FreshnessWindow(hours=24)
        window.set(timedelta(hours=48))

        assert window.current() == timedelta(hours=48)

    @pytest.mark.parametrize("bad", [timedelta(0), timedelta(hours=-1)])
    def test_rejects_non_positive_window(self, bad):
        window = FreshnessWindow(hours=24)

        with pytest.raises(ValueError):
            window.set(bad)
        assert window.current() == timedelta(hours=24)
