"""
Shared utilities for Celery tasks.

Provides database session management, async execution and a Redis lock
that keeps a task from running twice at the same time.
"""
import asyncio
import functools
from contextlib import contextmanager
from typing import Any, Callable, Coroutine, Iterator, Optional, Union

import redis
from redis.exceptions import LockError
import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from storefront.core.config import settings

logger = structlog.get_logger()

LOCK_PREFIX = "celery_lock:"


def create_task_session_maker():
    """
    Create a new async engine and session maker for the current event loop.

    Each task run creates its own engine; asyncpg connections cannot be
    shared across the event loops that ``run_async`` creates.

    Returns:
        Tuple of (async_sessionmaker, engine). The engine should be disposed
        after use to free resources.
    """
    url = settings.database_url_computed
    connect_args: dict[str, Any] = {}
    if url.startswith("postgresql+asyncpg"):
        connect_args = {
            "server_settings": {
                "statement_timeout": "60000",
                "idle_in_transaction_session_timeout": "300000",
                "application_name": "storefront_worker",
            },
            "command_timeout": 60,
        }

    engine = create_async_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        connect_args=connect_args,
    )
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    ), engine


def run_async(coro: Coroutine[Any, Any, Any]) -> Any:
    """
    Run async function in sync context (for Celery tasks).

    Args:
        coro: Async coroutine to execute.

    Returns:
        Result of the coroutine execution.
    """
    return asyncio.run(coro)


@contextmanager
def redis_lock(
    lock_name: str,
    timeout: int,
    redis_url: Optional[str] = None,
) -> Iterator[bool]:
    """
    Hold ``celery_lock:<lock_name>`` for the duration of the block.

    Yields True if the lock was acquired, False if another holder has it.
    The key expires after ``timeout`` seconds so a crashed worker cannot
    hold it forever. Release is token-checked: if the key expired and was
    taken by another worker, that worker's lock is left in place.
    """
    client = redis.Redis.from_url(redis_url or settings.redis_url)
    lock = client.lock(f"{LOCK_PREFIX}{lock_name}", timeout=timeout, blocking=False)
    acquired = bool(lock.acquire())
    try:
        yield acquired
    finally:
        if acquired:
            try:
                lock.release()
            except LockError:
                logger.warning(
                    "Lock expired before release, another run may hold it",
                    lock=lock_name,
                    timeout=timeout,
                )


def single_instance(
    lock_name: Union[str, Callable[..., str]],
    timeout: Optional[int] = None,
    redis_url: Optional[str] = None,
):
    """
    Skip a task if a previous run with the same lock name is still going.

    Args:
        lock_name: Lock name, or a callable that builds one from the task's
            arguments (for per-tenant locks).
        timeout: Lock expiry in seconds. Defaults to
            ``settings.category_lock_timeout_seconds``.
        redis_url: Redis to lock in. Defaults to ``settings.redis_url``.

    Returns ``{"status": "skipped", "reason": "previous_running"}`` when
    the lock is held elsewhere.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            name = lock_name(*args, **kwargs) if callable(lock_name) else lock_name
            lock_timeout = timeout or settings.category_lock_timeout_seconds
            with redis_lock(name, lock_timeout, redis_url) as acquired:
                if not acquired:
                    logger.info("Task skipped, previous run still holds the lock", lock=name)
                    return {"status": "skipped", "reason": "previous_running"}
                return func(*args, **kwargs)
        return wrapper
    return decorator
