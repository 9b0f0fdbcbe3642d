"""
Directory refresh task.

Each worker process keeps one DirectoryMaterializer, so the last published
snapshot stays readable in that process between runs.
"""
from typing import Any, Optional

import structlog
from celery import shared_task

from storefront.services.directory import DirectoryMaterializer, SqlDirectorySource
from storefront.tasks.utils import create_task_session_maker, run_async

logger = structlog.get_logger()

_materializer: Optional[DirectoryMaterializer] = None


def get_materializer(source: SqlDirectorySource) -> DirectoryMaterializer:
    """Process-wide materializer, pointed at this run's source."""
    global _materializer
    if _materializer is None:
        _materializer = DirectoryMaterializer(source)
    else:
        _materializer.source = source
    return _materializer


@shared_task
def refresh_directory() -> dict[str, Any]:
    """
    Rebuild the public directory snapshot.

    Runs every ``directory_refresh_interval_minutes`` via celery beat.

    Returns:
        Dictionary with snapshot statistics.
    """
    return run_async(_refresh_directory_async())


async def _refresh_directory_async() -> dict[str, Any]:
    session_maker, engine = create_task_session_maker()
    try:
        materializer = get_materializer(SqlDirectorySource(session_maker))
        snapshot = await materializer.refresh()
        return {
            "status": "ok",
            "version": snapshot.version,
            "generated_at": snapshot.generated_at.isoformat(),
            "entries": len(snapshot),
            "stores": len(snapshot.tenant_ids),
            "categories": len(snapshot.category_stats()),
        }
    finally:
        await engine.dispose()
