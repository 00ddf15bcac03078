"""
Retry with exponential backoff.

Small self-contained helper used by the batching queue so the backoff policy
stays exactly reproducible: ``base_delay_ms * 2**attempt`` between attempts,
no ceiling and no jitter.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

logger = structlog.get_logger(__name__)

R = TypeVar("R")


def backoff_delay_ms(base_delay_ms: int, attempt: int) -> int:
    """Delay to wait after the failed attempt with index ``attempt`` (0-based)."""
    return base_delay_ms * (2 ** attempt)


async def retry_with_backoff(
    operation: Callable[[], Awaitable[R]],
    *,
    retries: int,
    base_delay_ms: int,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    context: Optional[dict] = None,
) -> R:
    """
    Run ``operation`` until it succeeds or the attempts are exhausted.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        retries: Extra attempts after the first one (negative behaves as 0)
        base_delay_ms: Base delay for the exponential backoff
        sleep: Coroutine used to wait, receives seconds
        context: Extra key/values bound to the log records

    Returns:
        Whatever the successful attempt returned

    Raises:
        The exception raised by the final attempt, unchanged
    """
    attempts = max(retries, 0) + 1
    log = logger.bind(**(context or {}))

    for attempt in range(attempts):
        try:
            return await operation()
        except Exception as e:
            if attempt == attempts - 1:
                log.error(
                    "retries_exhausted",
                    attempts=attempts,
                    error=str(e),
                )
                raise

            delay_ms = backoff_delay_ms(base_delay_ms, attempt)
            log.warning(
                "attempt_failed",
                attempt=attempt + 1,
                attempts=attempts,
                retry_in_ms=delay_ms,
                error=str(e),
            )
            await sleep(delay_ms / 1000)
