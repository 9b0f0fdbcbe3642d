"""
Promotion expiry sweep task.
"""
from typing import Any

import structlog
from celery import shared_task

from storefront.core.data_freshness import utcnow
from storefront.services.promotions import PromotionLifecycleManager
from storefront.tasks.utils import create_task_session_maker, run_async

logger = structlog.get_logger()


@shared_task
def sweep_expired_promotions() -> dict[str, Any]:
    """
    Clear promotions whose expiry has passed.

    Runs every ``promotion_sweep_interval_minutes`` via celery beat.
    """
    return run_async(_sweep_expired_promotions_async())


async def _sweep_expired_promotions_async() -> dict[str, Any]:
    now = utcnow()
    session_maker, engine = create_task_session_maker()
    try:
        cleared = await PromotionLifecycleManager(session_maker).sweep_expired(now)
        return {"status": "ok", "cleared": cleared, "swept_at": now.isoformat()}
    finally:
        await engine.dispose()
