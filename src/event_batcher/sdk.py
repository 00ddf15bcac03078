"""
Event SDK.

Stamps caller events with a message id and timestamp, queues them, and
delivers them in batches through a transport.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

import structlog

from event_batcher.config import SdkConfig, get_config
from event_batcher.core.queue import BatchQueue
from event_batcher.core.timers import AsyncioTimerProvider, TimerProvider
from event_batcher.events.types import (
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
from event_batcher.transport.http import HttpTransport
from event_batcher.transport.interface import Transport

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def _default_uuid() -> str:
    return str(uuid.uuid4())


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class EventSdk(Generic[T]):
    """
    Batched event client.

    Usage:
        ```python
        async with EventSdk(SdkConfig(write_key="...")) as sdk:
            sdk.identify(IdentifyData(user_id="123", traits={"plan": "pro"}))
            sdk.track(TrackData(user_id="123", event="Signed Up"))
        ```

    Event methods are synchronous and never raise for delivery failures;
    those surface from ``flush()``. Called without a running event loop they
    only queue the event; it is sent by the next ``flush()``.
    """

    def __init__(
        self,
        config: Optional[SdkConfig] = None,
        transport: Optional[Transport] = None,
        timer: Optional[TimerProvider[T]] = None,
        uuid_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], str]] = None,
    ):
        """
        Initialize the SDK.

        Args:
            config: SDK configuration. Uses global config if not provided.
            transport: Batch transport (HTTP transport built from config if not provided)
            timer: Timer provider for idle flushes
            uuid_factory: Generates message ids
            clock: Returns the ISO-8601 timestamp stamped on events

        Raises:
            ValueError: If no transport is given and no write key is configured
        """
        self.config = config or get_config()
        self.transport = transport or HttpTransport(self.config)

        self._uuid = uuid_factory or _default_uuid
        self._clock = clock or _utc_now

        self.queue: BatchQueue[BatchItem, T] = BatchQueue(
            batch_size=self.config.batch_size,
            timeout_ms=self.config.timeout_ms,
            execute_batch=self._execute_batch,
            timer=timer or AsyncioTimerProvider(),
            base_delay_ms=self.config.base_delay_ms,
            retries=self.config.retries,
        )

    async def __aenter__(self) -> "EventSdk[T]":
        await self.transport.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # Event methods

    def identify(self, params: IdentifyData) -> BatchItem:
        """Queue an identify event."""
        item = self._stamp(params, EventType.IDENTIFY, traits=params.traits)
        return self._submit(item)

    def track(self, params: TrackData) -> BatchItem:
        """Queue a track event."""
        item = self._stamp(
            params,
            EventType.TRACK,
            event=params.event,
            properties=params.properties,
            files=params.files,
        )
        return self._submit(item)

    def page(self, params: PageData) -> BatchItem:
        """Queue a page event."""
        item = self._stamp(params, EventType.PAGE, name=params.name, properties=params.properties)
        return self._submit(item)

    def screen(self, params: ScreenData) -> BatchItem:
        """Queue a screen event."""
        item = self._stamp(params, EventType.SCREEN, name=params.name, properties=params.properties)
        return self._submit(item)

    def subscribe(self, params: SubscribeData) -> BatchItem:
        """Queue a subscription to a subscription group."""
        return self._subscription_change(params, SubscriptionChange.SUBSCRIBE)

    def unsubscribe(self, params: SubscribeData) -> BatchItem:
        """Queue an unsubscription from a subscription group."""
        return self._subscription_change(params, SubscriptionChange.UNSUBSCRIBE)

    async def flush(self) -> None:
        """Deliver every queued event."""
        await self.queue.flush()

    async def close(self) -> None:
        """Flush queued events and release the transport."""
        try:
            await self.flush()
        finally:
            # A drain may still be sending items it sliced before the flush
            await self.queue.wait_idle()
            await self.transport.disconnect()

    def get_stats(self) -> Dict[str, Any]:
        """Get SDK statistics."""
        return {
            "host": self.config.host,
            "queue": self.queue.get_stats(),
        }

    # Internals

    def _subscription_change(
        self,
        params: SubscribeData,
        change: SubscriptionChange,
    ) -> BatchItem:
        item = self._stamp(
            params,
            EventType.TRACK,
            event=InternalEventType.SUBSCRIPTION_CHANGE.value,
            properties={
                "subscriptionId": params.subscription_group_id,
                "change": change.value,
            },
        )
        return self._submit(item)

    def _stamp(self, params: BaseEventData, event_type: EventType, **fields) -> BatchItem:
        """Build a batch item, filling in message id and timestamp when missing."""
        return BatchItem(
            type=event_type,
            message_id=params.message_id or self._uuid(),
            timestamp=params.timestamp or self._clock(),
            user_id=params.user_id,
            anonymous_id=params.anonymous_id,
            context=params.context,
            **fields,
        )

    def _submit(self, item: BatchItem) -> BatchItem:
        self.queue.submit(item)
        logger.debug(
            "event_queued",
            type=item.type.value,
            message_id=item.message_id,
            pending=self.queue.pending_count,
        )
        return item

    async def _execute_batch(self, batch: List[BatchItem]) -> None:
        data = BatchAppData(batch=batch)
        await self.transport.issue_request(data)
        logger.info("batch_delivered", size=data.size)
