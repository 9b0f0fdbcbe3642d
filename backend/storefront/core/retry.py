"""
Bounded retry with exponential backoff for provider calls.

Only TransientProviderError is retried. Anything else propagates on the
first attempt so validation-class failures are never repeated.
"""
import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

import structlog

from storefront.core.config import settings
from storefront.core.exceptions import TransientProviderError

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry configuration.

    Delay before attempt ``n`` (n >= 2) is
    ``base_delay * backoff_factor ** (n - 2)``, capped at ``max_delay``.
    """
    max_attempts: int = 3
    backoff_factor: float = 2.0
    base_delay: float = 0.5
    max_delay: float = 10.0

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_attempts=settings.provider_max_retries,
            backoff_factor=settings.provider_backoff_factor,
            base_delay=settings.provider_backoff_base_seconds,
            max_delay=settings.provider_backoff_max_seconds,
        )

    def delay_for(self, failed_attempt: int) -> float:
        """Seconds to wait after ``failed_attempt`` (1-based) failed."""
        delay = self.base_delay * self.backoff_factor ** (failed_attempt - 1)
        return min(delay, self.max_delay)


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    **log_context: Any,
) -> T:
    """
    Run ``operation`` until it succeeds or the policy is exhausted.

    Args:
        operation: Zero-argument coroutine factory. Called once per attempt.
        policy: Retry limits and backoff.
        sleep: Awaitable sleep, injectable for tests.
        **log_context: Extra key/values added to retry log lines.

    Returns:
        The operation's result.

    Raises:
        TransientProviderError: The last transient error once attempts run out.
        Exception: Any non-transient error, immediately.
    """
    attempt = 1
    while True:
        try:
            return await operation()
        except TransientProviderError as e:
            if attempt >= policy.max_attempts:
                logger.warning(
                    "Provider call failed, retries exhausted",
                    attempts=attempt,
                    error=str(e),
                    **log_context,
                )
                raise
            wait_seconds = policy.delay_for(attempt)
            logger.info(
                "Transient provider failure, retrying",
                attempt=attempt,
                wait_seconds=wait_seconds,
                error=str(e),
                **log_context,
            )
            await sleep(wait_seconds)
            attempt += 1
