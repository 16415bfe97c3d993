"""
tests/test_notification.py

Unit tests for gateway/services/notification.py.
Covers FCM message shapes, data stringification and failure isolation.
"""

from unittest.mock import patch

import pytest

from gateway.schemas import PushMessage
from gateway.services.notification import (
    FcmTransport,
    PushNotifier,
    build_message,
    stringify_data,
)
from tests.fixtures import RecordingTransport


def test_stringify_data_converts_every_value() -> None:
    data = stringify_data({"lessonId": "l1", "count": 3, "urgent": True, "missing": None})
    assert data == {"lessonId": "l1", "count": "3", "urgent": "true"}


def test_stringify_data_drops_trailing_zero_on_whole_floats() -> None:
    assert stringify_data({"hours": 2.0, "ratio": 1.5}) == {"hours": "2", "ratio": "1.5"}


def test_visible_message_has_notification_block() -> None:
    message = build_message("tok", "Title", "Body", {"type": "lesson_created"})

    assert message.token == "tok"
    assert message.notification.title == "Title"
    assert message.notification.body == "Body"
    assert message.data == {"type": "lesson_created"}
    assert message.android.priority == "high"
    assert message.android.notification.click_action == "FLUTTER_NOTIFICATION_CLICK"
    assert message.android.notification.sound == "default"
    assert message.apns.payload.aps.alert.title == "Title"
    assert message.apns.payload.aps.badge == 1


def test_silent_message_folds_title_and_body_into_data() -> None:
    message = build_message(
        "tok", "Dave", "See you at 10", {"type": "chat_message"}, silent=True
    )

    assert message.notification is None
    assert message.data == {
        "type": "chat_message",
        "title": "Dave",
        "body": "See you at 10",
    }
    assert message.android.priority == "high"
    assert message.android.notification is None
    assert message.apns.payload.aps.content_available is True
    assert message.apns.payload.aps.alert is None


@pytest.mark.asyncio
async def test_send_returns_true_on_success() -> None:
    transport = RecordingTransport()
    notifier = PushNotifier(transport)

    assert await notifier.send("tok", "Title", "Body") is True
    assert transport.tokens == ["tok"]


@pytest.mark.asyncio
async def test_send_swallows_transport_failure() -> None:
    """A delivery failure is logged and reported, never raised."""
    transport = RecordingTransport(failing_tokens=["bad"])
    notifier = PushNotifier(transport)

    assert await notifier.send("bad", "Title", "Body") is False
    assert transport.sent == []


@pytest.mark.asyncio
async def test_send_all_continues_after_failure() -> None:
    transport = RecordingTransport(failing_tokens=["bad"])
    notifier = PushNotifier(transport)
    intents = [
        PushMessage(token="good_1", title="T", body="B"),
        PushMessage(token="bad", title="T", body="B"),
        PushMessage(token="good_2", title="T", body="B"),
    ]

    sent = await notifier.send_all(intents)

    assert sent == 2
    assert transport.tokens == ["good_1", "good_2"]


@pytest.mark.asyncio
async def test_fcm_transport_sends_through_firebase_messaging() -> None:
    message = build_message("tok", "Title", "Body")
    with patch(
        "gateway.services.notification.messaging.send",
        return_value="projects/p/messages/1",
    ) as mock_send:
        transport = FcmTransport(app=None)
        message_id = await transport.send(message)

    assert message_id == "projects/p/messages/1"
    mock_send.assert_called_once_with(message, app=None)
