"""
Timer providers for the batching queue.

The queue never touches a concrete timer facility; it schedules and cancels
single-shot callbacks through a provider, parameterized over the handle type.
"""

import asyncio
from typing import Callable, Optional, Protocol, TypeVar

T = TypeVar("T")


class TimerProvider(Protocol[T]):
    """Schedules a deferred single-shot callback and cancels a pending one."""

    def schedule_once(self, callback: Callable[[], None], delay_ms: int) -> T:
        """
        Schedule ``callback`` to run once after ``delay_ms`` milliseconds.

        Returns:
            An opaque handle accepted by ``cancel``
        """
        ...

    def cancel(self, handle: T) -> None:
        """Cancel a pending callback. Cancelling a fired handle is a no-op."""
        ...


class AsyncioTimerProvider:
    """
    Timer provider backed by the asyncio event loop.

    The loop is resolved when a timer is scheduled, so the provider can be
    created outside of a running loop.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def schedule_once(
        self,
        callback: Callable[[], None],
        delay_ms: int,
    ) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_ms / 1000, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()
