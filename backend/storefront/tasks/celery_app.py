"""
Celery application configuration.

Directory task schedule:
- Directory refresh: every ``directory_refresh_interval_minutes``
- Promotion expiry sweep: every ``promotion_sweep_interval_minutes``
- Category reconcile fan-out: every ``category_reconcile_interval_hours``
"""
from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging as celery_setup_logging

from storefront.core.config import settings
from storefront.core.logging import setup_logging

celery_app = Celery(
    "storefront",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "storefront.tasks.directory",
        "storefront.tasks.promotions",
        "storefront.tasks.categories",
    ],
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    # Result settings
    result_expires=3600,  # Results expire after 1 hour

    # Worker settings
    worker_prefetch_multiplier=1,

    beat_schedule={
        "directory-refresh": {
            "task": "storefront.tasks.directory.refresh_directory",
            "schedule": crontab(minute=f"*/{settings.directory_refresh_interval_minutes}"),
        },

        "promotions-sweep-expired": {
            "task": "storefront.tasks.promotions.sweep_expired_promotions",
            "schedule": crontab(minute=f"*/{settings.promotion_sweep_interval_minutes}"),
        },

        "categories-reconcile-all": {
            "task": "storefront.tasks.categories.reconcile_all_tenant_categories",
            "schedule": crontab(minute=0, hour=f"*/{settings.category_reconcile_interval_hours}"),
        },
    },

    task_routes={
        "storefront.tasks.directory.*": {"queue": "directory"},
        "storefront.tasks.promotions.*": {"queue": "directory"},
        "storefront.tasks.categories.*": {"queue": "categories"},
    },

    task_default_queue="default",
)


@celery_setup_logging.connect
def configure_worker_logging(**kwargs):
    """Use structlog in workers instead of Celery's logging setup."""
    setup_logging()
