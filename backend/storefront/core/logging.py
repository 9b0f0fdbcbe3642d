"""
Logging configuration for workers and scripts.

Modules log through ``structlog.get_logger()``; this module only decides
how those events are rendered.
"""
import logging
import sys

import structlog

from storefront.core.config import settings

NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "celery.worker.strategy")


def setup_logging(debug: bool | None = None) -> None:
    """
    Configure structlog and route stdlib logging through stdout.

    Args:
        debug: Override for ``settings.api_debug``. Debug renders coloured
            console lines at DEBUG level; otherwise JSON lines at INFO.
    """
    if debug is None:
        debug = settings.api_debug
    log_level = logging.DEBUG if debug else logging.INFO

    renderer = (
        structlog.dev.ConsoleRenderer()
        if debug
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(app=settings.app_name)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
