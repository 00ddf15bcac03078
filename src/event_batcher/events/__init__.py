"""
Event models for the batch ingestion API.
"""

from event_batcher.events.types import (
    AppFileType,
    Base64EncodedFile,
    BaseEventData,
    BatchAppData,
    BatchItem,
    EventType,
    IdentifyData,
    InternalEventType,
    PageData,
    ScreenData,
    SubscribeData,
    SubscriptionChange,
    TrackData,
)

__all__ = [
    "AppFileType",
    "Base64EncodedFile",
    "BaseEventData",
    "BatchAppData",
    "BatchItem",
    "EventType",
    "IdentifyData",
    "InternalEventType",
    "PageData",
    "ScreenData",
    "SubscribeData",
    "SubscriptionChange",
    "TrackData",
]
