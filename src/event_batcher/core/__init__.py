"""
Core batching components.

This module contains the batching queue, its retry helper and the timer
providers it schedules idle flushes with.
"""

from event_batcher.core.queue import BatchFunction, BatchQueue
from event_batcher.core.retry import backoff_delay_ms, retry_with_backoff
from event_batcher.core.timers import AsyncioTimerProvider, TimerProvider

__all__ = [
    "BatchQueue",
    "BatchFunction",
    "retry_with_backoff",
    "backoff_delay_ms",
    "TimerProvider",
    "AsyncioTimerProvider",
]
