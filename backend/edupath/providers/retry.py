"""Retry helper for provider calls.

Retryable failures (see ``ProviderError.retryable``) are retried with
exponential backoff plus up to 10% jitter, capped at
``retry_max_delay_ms``. A rate limit that names its own wait wins over the
computed backoff.
"""

import asyncio
import random
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

import structlog

from edupath.providers.errors import RETRYABLE_ERRORS, RateLimitError

__all__ = ["backoff_delay", "with_retries"]

if TYPE_CHECKING:
    from edupath.providers.config import ProviderConfig

logger = structlog.get_logger()

T = TypeVar("T")


def backoff_delay(attempt: int, config: "ProviderConfig", error: Exception) -> float:
    """Seconds to wait before retry number ``attempt + 1``.

    Args:
        attempt: Zero-based index of the attempt that just failed.
        config: Provider configuration with the backoff bounds.
        error: The failure being retried.

    Returns:
        Delay in seconds.
    """
    if isinstance(error, RateLimitError) and error.retry_after_seconds:
        return error.retry_after_seconds
    base_ms = config.retry_base_delay_ms * (2**attempt)
    jitter_ms = random.uniform(0, base_ms * 0.1)  # nosec B311
    return min(base_ms + jitter_ms, config.retry_max_delay_ms) / 1000


async def with_retries(
    func: Callable[[], Awaitable[T]],
    config: "ProviderConfig",
    retryable_errors: tuple[type[Exception], ...] = RETRYABLE_ERRORS,
) -> T:
    """Await ``func()`` up to ``config.max_retries + 1`` times.

    Args:
        func: Zero-argument coroutine factory (called once per attempt).
        config: Provider configuration with retry settings.
        retryable_errors: Failures worth another attempt.

    Returns:
        The first successful result.

    Raises:
        Exception: The last retryable failure once attempts run out, or any
            non-retryable failure immediately.
    """
    attempts = config.max_retries + 1
    for attempt in range(attempts):
        try:
            return await func()
        except retryable_errors as e:
            if attempt + 1 == attempts:
                raise
            delay = backoff_delay(attempt, config, e)
            logger.warning(
                "provider_retry",
                attempt=attempt + 1,
                max_attempts=attempts,
                error_type=type(e).__name__,
                delay_s=round(delay, 2),
            )
            await asyncio.sleep(delay)
    raise RuntimeError("max_retries must not be negative")
