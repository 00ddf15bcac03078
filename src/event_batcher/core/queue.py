"""
Batching queue.

Accumulates submitted items and hands them to an asynchronous executor in
fixed-size chunks, either when the batch size is reached or when the idle
timeout fires. Chunks run one at a time through a single drain loop, and
each chunk is retried with exponential backoff before it is dropped.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, TypeVar

import structlog

from event_batcher.core.retry import retry_with_backoff
from event_batcher.core.timers import AsyncioTimerProvider, TimerProvider

logger = structlog.get_logger(__name__)

Q = TypeVar("Q")
T = TypeVar("T")

BatchFunction = Callable[[List[Q]], Awaitable[None]]


def _loop_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class BatchQueue(Generic[Q, T]):
    """
    Time- and size-bounded batching queue.

    Items leave the queue in submission order, in contiguous chunks of at most
    ``batch_size``. At most one drain loop runs per queue; concurrent
    ``flush()`` calls await the same drain and observe the same outcome.

    Drains and idle timers run on the running event loop. Items submitted
    without one wait for the next flush.

    Usage:
        ```python
        queue = BatchQueue(batch_size=5, timeout_ms=500, execute_batch=send)
        queue.submit(event)
        await queue.flush()
        ```
    """

    def __init__(
        self,
        batch_size: int,
        timeout_ms: int,
        execute_batch: BatchFunction,
        timer: Optional[TimerProvider[T]] = None,
        base_delay_ms: int = 500,
        retries: int = 5,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the queue.

        Args:
            batch_size: Maximum number of items handed to one executor call
            timeout_ms: Idle time before a partial batch is flushed
            execute_batch: Coroutine function receiving each chunk
            timer: Timer provider (asyncio loop timers if not provided)
            base_delay_ms: Base delay of the retry backoff
            retries: Extra attempts per chunk before it is dropped
            sleep: Coroutine used to wait between retries
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        if timeout_ms < 0:
            raise ValueError(f"timeout_ms must not be negative, got {timeout_ms}")
        if base_delay_ms < 0:
            raise ValueError(f"base_delay_ms must not be negative, got {base_delay_ms}")

        self.batch_size = batch_size
        self.timeout_ms = timeout_ms
        self.base_delay_ms = base_delay_ms
        self.retries = max(retries, 0)

        self._execute_batch = execute_batch
        self._timer: TimerProvider[T] = timer or AsyncioTimerProvider()
        self._sleep = sleep

        # State
        self._pending: List[Q] = []
        self._timer_handle: Optional[T] = None
        self._drain: Optional[asyncio.Task] = None

        # Statistics
        self._stats = {
            "total_submitted": 0,
            "batches_executed": 0,
            "batches_dropped": 0,
            "items_dropped": 0,
            "retries": 0,
        }

    @property
    def pending_count(self) -> int:
        """Number of items waiting to be drained."""
        return len(self._pending)

    @property
    def is_draining(self) -> bool:
        """Whether a drain loop is currently in flight."""
        return self._drain is not None

    def submit(self, item: Q) -> None:
        """
        Add an item to the queue.

        Starts a drain when the batch size is reached, otherwise arms the idle
        timer if this is the first pending item. Never raises; failures of a
        drain started here surface through ``flush()``.

        Outside a running event loop the item is only queued. It goes out with
        the next ``flush()`` or size-triggered drain.

        Args:
            item: Opaque item to batch
        """
        self._pending.append(item)
        self._stats["total_submitted"] += 1

        if not _loop_running():
            logger.debug("submit_outside_loop", pending=len(self._pending))
            return

        if len(self._pending) >= self.batch_size:
            self._start_drain()
        elif len(self._pending) == 1:
            self._start_timer()

    async def flush(self) -> None:
        """
        Drain everything currently queued.

        Resolves at once when nothing is queued, even if a drain is still
        executing its last chunk. Otherwise joins the in-flight drain, or
        starts one, and resolves once it has emptied the queue.

        Raises:
            The executor's exception when a chunk exhausts its retries
        """
        self._clear_timer()

        if not self._pending:
            return

        # The drain is shared; a cancelled caller must not cancel it
        await asyncio.shield(self._start_drain())

    async def wait_idle(self) -> None:
        """
        Wait for the in-flight drain, if any, to finish.

        Does not start a drain and does not raise the drain's error, which
        belongs to whoever flushed.
        """
        drain = self._drain
        if drain is None:
            return

        await asyncio.wait({drain})

    def get_stats(self) -> Dict[str, Any]:
        """Get queue statistics."""
        return {
            "pending": len(self._pending),
            "timer_armed": self._timer_handle is not None,
            "draining": self._drain is not None,
            "batch_size": self.batch_size,
            "timeout_ms": self.timeout_ms,
            **self._stats,
        }

    def _start_drain(self) -> Optional[asyncio.Task]:
        """Cancel the idle timer and return the in-flight drain, starting one if needed."""
        self._clear_timer()

        if self._drain is not None:
            return self._drain

        if not self._pending:
            return None

        self._drain = asyncio.get_running_loop().create_task(self._drain_loop())
        self._drain.add_done_callback(self._on_drain_done)
        logger.debug("drain_started", pending=len(self._pending))
        return self._drain

    async def _drain_loop(self) -> None:
        """Execute chunks until the queue is empty."""
        try:
            # Length is re-read each iteration so late submissions are picked up
            while self._pending:
                chunk = self._pending[:self.batch_size]
                del self._pending[:self.batch_size]

                # Anything armed now only covers items this loop already owns
                self._clear_timer()

                await self._execute_chunk(chunk)
        finally:
            self._drain = None

    async def _execute_chunk(self, chunk: List[Q]) -> None:
        """Run one chunk through the retry wrapper."""
        calls = 0

        async def attempt() -> None:
            nonlocal calls
            calls += 1
            await self._execute_batch(chunk)

        try:
            await retry_with_backoff(
                attempt,
                retries=self.retries,
                base_delay_ms=self.base_delay_ms,
                sleep=self._sleep,
                context={"chunk_size": len(chunk)},
            )
        except Exception as e:
            self._stats["batches_dropped"] += 1
            self._stats["items_dropped"] += len(chunk)
            logger.error(
                "batch_dropped",
                size=len(chunk),
                remaining=len(self._pending),
                error=str(e),
            )
            raise
        finally:
            self._stats["retries"] += max(calls - 1, 0)

        self._stats["batches_executed"] += 1
        logger.debug("batch_executed", size=len(chunk), attempts=calls)

    def _on_drain_done(self, task: asyncio.Task) -> None:
        # A task cancelled before its first step never reaches the finally block
        if self._drain is task:
            self._drain = None

        # Retrieve the outcome so drains nobody awaited do not warn at shutdown
        if task.cancelled():
            logger.warning("drain_cancelled", pending=len(self._pending))
            return

        error = task.exception()
        if error is not None:
            logger.debug("drain_failed", error=str(error), pending=len(self._pending))

    def _start_timer(self) -> None:
        """Arm the idle timer."""
        self._clear_timer()
        self._timer_handle = self._timer.schedule_once(self._on_timer, self.timeout_ms)

    def _on_timer(self) -> None:
        self._timer_handle = None
        self._start_drain()

    def _clear_timer(self) -> None:
        """Cancel the idle timer if one is armed."""
        if self._timer_handle is not None:
            self._timer.cancel(self._timer_handle)
            self._timer_handle = None
