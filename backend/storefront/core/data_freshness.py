"""
Data freshness checking utilities.

Used by the directory materializer to decide whether a tenant's last
external sync is recent enough for the tenant to be listed.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from storefront.core.config import settings


def utcnow() -> datetime:
    """Timezone-aware current time. Default clock for services."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_data_fresh(
    latest_time: Optional[datetime],
    freshness_window: timedelta,
    now: Optional[datetime] = None,
) -> bool:
    """
    Check if data is considered fresh based on the latest timestamp.

    Args:
        latest_time: The timestamp of the most recent sync
        freshness_window: Maximum age for data to be considered fresh
        now: Reference time, defaults to the current UTC time

    Returns:
        True if ``now - latest_time <= freshness_window``, False if stale or missing
    """
    if latest_time is None:
        return False

    now = ensure_utc(now) if now is not None else utcnow()
    age = now - ensure_utc(latest_time)

    return age <= freshness_window


class FreshnessWindow:
    """
    Runtime-adjustable freshness window.

    The materializer reads ``current()`` on every refresh, so changing the
    window takes effect on the next refresh without a redeploy.
    """

    def __init__(self, hours: float | None = None):
        self._window = timedelta(
            hours=settings.directory_freshness_hours if hours is None else hours
        )

    def current(self) -> timedelta:
        return self._window

    def set(self, window: timedelta) -> None:
        if window <= timedelta(0):
            raise ValueError(f"Freshness window must be positive, got {window}")
        self._window = window
