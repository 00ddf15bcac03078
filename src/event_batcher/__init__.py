"""
Event Batcher

A batched event client. Events are queued as they happen and delivered in
size- or time-bounded batches, one request at a time, with retries.
"""

__version__ = "0.1.0"

from event_batcher.core.queue import BatchQueue
from event_batcher.events.types import (
    IdentifyData,
    PageData,
    ScreenData,
    SubscribeData,
    TrackData,
)
from event_batcher.sdk import EventSdk

__all__ = [
    "BatchQueue",
    "EventSdk",
    "IdentifyData",
    "TrackData",
    "PageData",
    "ScreenData",
    "SubscribeData",
]
