"""
Event models.

Caller-facing event payloads and the stamped batch items that flow through
the batching queue into a batch request body.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class EventType(str, Enum):
    """Types of events accepted by the batch endpoint."""
    IDENTIFY = "identify"
    TRACK = "track"
    PAGE = "page"
    SCREEN = "screen"


class SubscriptionChange(str, Enum):
    """Direction of a subscription group change."""
    SUBSCRIBE = "Subscribe"
    UNSUBSCRIBE = "Unsubscribe"


class InternalEventType(str, Enum):
    """Reserved event names emitted by the platform itself."""
    MESSAGE_SENT = "DFInternalMessageSent"
    BAD_WORKSPACE_CONFIGURATION = "DFBadWorkspaceConfiguration"
    MESSAGE_FAILURE = "DFMessageFailure"
    MESSAGE_SKIPPED = "DFMessageSkipped"
    SEGMENT_BROADCAST = "DFSegmentBroadcast"
    SUBSCRIPTION_CHANGE = "DFSubscriptionChange"
    EMAIL_DROPPED = "DFEmailDropped"
    EMAIL_DELIVERED = "DFEmailDelivered"
    EMAIL_OPENED = "DFEmailOpened"
    EMAIL_CLICKED = "DFEmailClicked"
    EMAIL_BOUNCED = "DFEmailBounced"
    EMAIL_MARKED_SPAM = "DFEmailMarkedSpam"
    SMS_DELIVERED = "DFSmsDelivered"
    SMS_FAILED = "DFSmsFailed"
    JOURNEY_NODE_PROCESSED = "DFJourneyNodeProcessed"
    MANUAL_SEGMENT_UPDATE = "DFManualSegmentUpdate"
    ATTACHED_FILES = "DFAttachedFiles"
    USER_TRACK_SIGNAL = "DFUserTrackSignal"
    GROUP_USER_ASSIGNMENT = "DFGroupUserAssignment"
    USER_GROUP_ASSIGNMENT = "DFUserGroupAssignment"


class AppFileType(str, Enum):
    """How an attached file is transported."""
    BASE64_ENCODED = "Base64Encoded"
    BLOB_STORAGE = "BlobStorage"


@dataclass
class Base64EncodedFile:
    """A file attached to a track event, inlined as base64."""

    name: str
    mime_type: str
    data: str
    type: AppFileType = AppFileType.BASE64_ENCODED

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "name": self.name,
            "mimeType": self.mime_type,
            "data": self.data,
        }


# ============================================================================
# Caller inputs
# ============================================================================

@dataclass
class BaseEventData:
    """
    Fields shared by every caller-supplied event.

    Exactly one of ``user_id`` (known user) or ``anonymous_id`` must be set.
    ``message_id`` and ``timestamp`` are stamped by the SDK when left empty.
    """

    user_id: Optional[str] = None
    anonymous_id: Optional[str] = None
    message_id: Optional[str] = None
    timestamp: Optional[str] = None
    context: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if (self.user_id is None) == (self.anonymous_id is None):
            raise ValueError("Exactly one of user_id or anonymous_id is required")


@dataclass
class IdentifyData(BaseEventData):
    traits: Optional[Dict[str, Any]] = None


@dataclass
class TrackData(BaseEventData):
    event: str = ""
    properties: Optional[Dict[str, Any]] = None
    files: Optional[List[Base64EncodedFile]] = None

    def __post_init__(self):
        super().__post_init__()
        if not self.event:
            raise ValueError("Track events require an event name")


@dataclass
class PageData(BaseEventData):
    name: Optional[str] = None
    properties: Optional[Dict[str, Any]] = None


@dataclass
class ScreenData(BaseEventData):
    name: Optional[str] = None
    properties: Optional[Dict[str, Any]] = None


@dataclass
class SubscribeData(BaseEventData):
    subscription_group_id: str = ""

    def __post_init__(self):
        super().__post_init__()
        if not self.subscription_group_id:
            raise ValueError("subscription_group_id is required")


# ============================================================================
# Batch payload
# ============================================================================

@dataclass
class BatchItem:
    """
    A stamped event ready to be batched.

    Attributes:
        type: Event type
        message_id: Unique id used by the server for deduplication
        timestamp: ISO-8601 time the event happened
        user_id: Known user id
        anonymous_id: Anonymous id when the user is not known
        event: Track event name
        name: Page or screen name
        traits: Identify traits
        properties: Track, page or screen properties
        files: Track attachments
        context: Free-form context
    """

    type: EventType
    message_id: str
    timestamp: Optional[str] = None
    user_id: Optional[str] = None
    anonymous_id: Optional[str] = None
    event: Optional[str] = None
    name: Optional[str] = None
    traits: Optional[Dict[str, Any]] = None
    properties: Optional[Dict[str, Any]] = None
    files: Optional[List[Base64EncodedFile]] = None
    context: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        """Validate after initialization."""
        if isinstance(self.type, str):
            self.type = EventType(self.type)

    def to_dict(self) -> dict:
        """Convert to the wire format, omitting unset fields."""
        data = {
            "type": self.type.value,
            "messageId": self.message_id,
            "timestamp": self.timestamp,
            "userId": self.user_id,
            "anonymousId": self.anonymous_id,
            "event": self.event,
            "name": self.name,
            "traits": self.traits,
            "properties": self.properties,
            "files": [f.to_dict() for f in self.files] if self.files else None,
            "context": self.context,
        }
        return {key: value for key, value in data.items() if value is not None}


@dataclass
class BatchAppData:
    """Body of a batch request."""

    batch: List[BatchItem] = field(default_factory=list)
    context: Optional[Dict[str, Any]] = None

    @property
    def size(self) -> int:
        return len(self.batch)

    def to_dict(self) -> dict:
        data: Dict[str, Any] = {"batch": [item.to_dict() for item in self.batch]}
        if self.context is not None:
            data["context"] = self.context
        return data
