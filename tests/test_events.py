"""
Test suite for event models and their wire format.
"""

import pytest

from event_batcher.events.types import (
    AppFileType,
    Base64EncodedFile,
    BatchAppData,
    BatchItem,
    EventType,
    IdentifyData,
    InternalEventType,
    PageData,
    SubscribeData,
    SubscriptionChange,
    TrackData,
)


class TestEventInputs:
    """Tests for caller-supplied event payloads."""

    def test_identify_with_user_id(self):
        data = IdentifyData(user_id="123", traits={"email": "a@example.com"})
        assert data.user_id == "123"
        assert data.anonymous_id is None

    def test_anonymous_page(self):
        data = PageData(anonymous_id="anon-1", name="Home")
        assert data.anonymous_id == "anon-1"

    def test_identity_required(self):
        with pytest.raises(ValueError):
            IdentifyData(traits={"plan": "free"})

    def test_both_identities_rejected(self):
        with pytest.raises(ValueError):
            TrackData(user_id="1", anonymous_id="2", event="Clicked")

    def test_track_requires_event(self):
        with pytest.raises(ValueError):
            TrackData(user_id="1")

    def test_subscribe_requires_group(self):
        with pytest.raises(ValueError):
            SubscribeData(user_id="1")


class TestBatchItem:
    """Tests for the stamped batch item."""

    def test_to_dict_uses_wire_keys(self):
        item = BatchItem(
            type=EventType.TRACK,
            message_id="msg-1",
            timestamp="2024-01-01T00:00:00+00:00",
            user_id="123",
            event="Purchased",
            properties={"amount": 10},
        )

        assert item.to_dict() == {
            "type": "track",
            "messageId": "msg-1",
            "timestamp": "2024-01-01T00:00:00+00:00",
            "userId": "123",
            "event": "Purchased",
            "properties": {"amount": 10},
        }

    def test_to_dict_omits_unset_fields(self):
        item = BatchItem(type=EventType.IDENTIFY, message_id="m", anonymous_id="anon")

        assert item.to_dict() == {
            "type": "identify",
            "messageId": "m",
            "anonymousId": "anon",
        }

    def test_type_normalized_from_string(self):
        item = BatchItem(type="screen", message_id="m", user_id="u")
        assert item.type == EventType.SCREEN

    def test_files_serialized(self):
        attachment = Base64EncodedFile(name="report.pdf", mime_type="application/pdf", data="ZGF0YQ==")
        item = BatchItem(
            type=EventType.TRACK,
            message_id="m",
            user_id="u",
            event=InternalEventType.ATTACHED_FILES.value,
            files=[attachment],
        )

        assert item.to_dict()["files"] == [
            {
                "type": AppFileType.BASE64_ENCODED.value,
                "name": "report.pdf",
                "mimeType": "application/pdf",
                "data": "ZGF0YQ==",
            }
        ]


class TestBatchAppData:
    """Tests for the batch request body."""

    def test_to_dict(self):
        items = [
            BatchItem(type=EventType.TRACK, message_id=str(i), user_id="u", event="E")
            for i in range(3)
        ]
        data = BatchAppData(batch=items)

        body = data.to_dict()
        assert data.size == 3
        assert [entry["messageId"] for entry in body["batch"]] == ["0", "1", "2"]
        assert "context" not in body

    def test_context_included(self):
        data = BatchAppData(batch=[], context={"library": "python"})
        assert data.to_dict() == {"batch": [], "context": {"library": "python"}}


def test_enum_values():
    assert SubscriptionChange.SUBSCRIBE.value == "Subscribe"
    assert SubscriptionChange.UNSUBSCRIBE.value == "Unsubscribe"
    assert InternalEventType.SUBSCRIPTION_CHANGE.value == "DFSubscriptionChange"
    assert [t.value for t in EventType] == ["identify", "track", "page", "screen"]
