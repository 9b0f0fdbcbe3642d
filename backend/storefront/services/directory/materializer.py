"""
Directory materializer.

Recomputes the public directory from the source tables and publishes it as
an immutable DirectorySnapshot. Readers call ``current_snapshot()`` and get
whichever complete snapshot was last published; a refresh builds the next
one off to the side and swaps a single reference when done.

Concurrent ``refresh()`` calls share one in-flight computation.
"""
import asyncio
import time
from datetime import datetime, timedelta
from typing import Callable, Optional

import structlog

from storefront.core.data_freshness import FreshnessWindow, is_data_fresh, utcnow
from storefront.models.tenant import LocationStatus
from storefront.services.directory.snapshot import DirectoryEntry, DirectorySnapshot
from storefront.services.directory.source import DirectorySource, DirectorySourceRow

logger = structlog.get_logger()


def is_listable(row: DirectorySourceRow, now: datetime, freshness_window: timedelta) -> bool:
    """True if the row may appear in the directory at ``now``."""
    return (
        bool(row.sync_enabled)
        and is_data_fresh(row.last_sync_at, freshness_window, now=now)
        and bool(row.directory_visible)
        and row.location_status == LocationStatus.ACTIVE.value
        and row.product_count > 0
        and bool(row.category_slug.strip())
    )


def to_entry(row: DirectorySourceRow) -> DirectoryEntry:
    return DirectoryEntry(
        tenant_id=row.tenant_id,
        store_name=row.store_name,
        store_slug=row.store_slug,
        category_id=row.category_id,
        category_slug=row.category_slug,
        category_name=row.category_name,
        product_count=row.product_count,
        latitude=row.latitude,
        longitude=row.longitude,
        address=row.address,
        city=row.city,
        state=row.state,
        postal_code=row.postal_code,
        last_product_update=row.last_product_update,
        last_sync_at=row.last_sync_at,
        is_promoted=bool(row.is_promoted),
        promotion_tier=row.promotion_tier if row.is_promoted else None,
    )


class DirectoryMaterializer:
    """
    Builds and publishes directory snapshots.

    Usage:
        materializer = DirectoryMaterializer(SqlDirectorySource(session_maker))
        snapshot = await materializer.refresh()
        entries = materializer.current_snapshot().entries_for_category("books")
    """

    def __init__(
        self,
        source: DirectorySource,
        freshness: Optional[FreshnessWindow] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.source = source
        self.freshness = freshness or FreshnessWindow()
        self.clock = clock
        self._snapshot = DirectorySnapshot.empty(
            generated_at=clock(),
            freshness_window_hours=self.freshness.current().total_seconds() / 3600,
        )
        self._inflight: Optional[asyncio.Task] = None
        self._waiters = 0

    def current_snapshot(self) -> DirectorySnapshot:
        """Last published snapshot. Version 0 means no refresh has completed yet."""
        return self._snapshot

    @property
    def refresh_in_progress(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def set_freshness_window(self, window: timedelta) -> None:
        """Change the freshness window; applies from the next refresh."""
        self.freshness.set(window)
        logger.info("Directory freshness window changed", hours=window.total_seconds() / 3600)

    async def refresh(self) -> DirectorySnapshot:
        """
        Recompute and publish a new snapshot.

        If a refresh is already running, wait for it and return its result
        instead of starting another. If the computation fails the previous
        snapshot stays published and every waiter gets the error. Cancelling
        the last waiter cancels the computation and nothing is published.
        """
        task = self._inflight
        if task is None or task.done():
            task = asyncio.get_running_loop().create_task(self._rebuild())
            task.add_done_callback(self._clear_inflight)
            self._inflight = task
        else:
            logger.debug("Joined in-flight directory refresh", waiters=self._waiters + 1)

        self._waiters += 1
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if self._waiters == 1 and not task.done():
                task.cancel()
            raise
        finally:
            self._waiters -= 1

    def _clear_inflight(self, task: asyncio.Task) -> None:
        if self._inflight is task:
            self._inflight = None

    async def _rebuild(self) -> DirectorySnapshot:
        started = time.monotonic()
        now = self.clock()
        window = self.freshness.current()

        try:
            rows = await self.source.fetch_rows()
        except Exception as e:
            logger.error("Directory refresh failed, keeping previous snapshot", error=str(e))
            raise

        entries = []
        excluded = 0
        for row in rows:
            if is_listable(row, now, window):
                entries.append(to_entry(row))
            else:
                excluded += 1

        snapshot = DirectorySnapshot.build(
            entries,
            generated_at=now,
            freshness_window_hours=window.total_seconds() / 3600,
            version=self._snapshot.version + 1,
        )
        self._snapshot = snapshot

        logger.info(
            "Directory snapshot published",
            version=snapshot.version,
            entries=len(snapshot),
            stores=len(snapshot.tenant_ids),
            excluded=excluded,
            duration_ms=round((time.monotonic() - started) * 1000, 1),
        )
        return snapshot
