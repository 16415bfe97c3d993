"""
gateway/services/notification.py

Push notification delivery over Firebase Cloud Messaging.
- build_message: visible vs. silent (data-only) FCM message shapes
- PushNotifier: sends one message or a batch, never raises on delivery failure
- FcmTransport: firebase-admin messaging client run off the event loop
"""

import asyncio
from typing import Any, Iterable, Optional, Protocol

import firebase_admin
import structlog
from firebase_admin import messaging

from gateway.constants import (
    ANDROID_CHANNEL_ID,
    ANDROID_CLICK_ACTION,
    PUSH_SOUND,
    TOKEN_LOG_PREFIX_LEN,
)
from gateway.schemas import PushMessage

logger = structlog.get_logger(__name__)


class PushTransport(Protocol):
    """Anything that can hand a built FCM message to the delivery service."""

    async def send(self, message: messaging.Message) -> str:
        ...


class FcmTransport:
    """PushTransport backed by firebase_admin.messaging."""

    def __init__(self, app: Optional[firebase_admin.App] = None) -> None:
        self._app = app

    async def send(self, message: messaging.Message) -> str:
        # messaging.send is blocking HTTP; keep it off the event loop
        return await asyncio.to_thread(messaging.send, message, app=self._app)


def stringify_data(data: Optional[dict[str, Any]]) -> dict[str, str]:
    """FCM data payloads only carry strings; None values are omitted."""
    result: dict[str, str] = {}
    for key, value in (data or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            result[key] = "true" if value else "false"
        elif isinstance(value, float) and value.is_integer():
            result[key] = str(int(value))
        else:
            result[key] = str(value)
    return result


def build_message(
    token: str,
    title: str,
    body: str,
    data: Optional[dict[str, Any]] = None,
    silent: bool = False,
) -> messaging.Message:
    """
    Build the FCM message for a single device.

    Silent messages carry no notification block so the platform does not
    display anything; title and body travel in the data payload and the
    client renders its own notification with reply/mark-read actions.
    """
    string_data = stringify_data(data)

    if silent:
        return messaging.Message(
            token=token,
            data={**string_data, "title": title, "body": body},
            android=messaging.AndroidConfig(priority="high"),
            apns=messaging.APNSConfig(
                payload=messaging.APNSPayload(
                    aps=messaging.Aps(content_available=True),
                ),
            ),
        )

    return messaging.Message(
        token=token,
        notification=messaging.Notification(title=title, body=body),
        data=string_data,
        android=messaging.AndroidConfig(
            priority="high",
            notification=messaging.AndroidNotification(
                sound=PUSH_SOUND,
                click_action=ANDROID_CLICK_ACTION,
                channel_id=ANDROID_CHANNEL_ID,
                priority="high",
                visibility="public",
                default_sound=True,
                default_vibrate_timings=True,
            ),
        ),
        apns=messaging.APNSConfig(
            payload=messaging.APNSPayload(
                aps=messaging.Aps(
                    sound=PUSH_SOUND,
                    alert=messaging.ApsAlert(title=title, body=body),
                    badge=1,
                ),
            ),
        ),
    )


class PushNotifier:
    """Delivery adapter used by every handler."""

    def __init__(self, transport: PushTransport) -> None:
        self._transport = transport

    async def send(
        self,
        token: str,
        title: str,
        body: str,
        data: Optional[dict[str, Any]] = None,
        silent: bool = False,
    ) -> bool:
        """
        Send a push notification to one device.

        Returns True if the transport accepted the message. Delivery errors
        are logged and reported as False, never raised, so one bad token
        cannot abort a batch or fail the triggering event.
        """
        token_prefix = token[:TOKEN_LOG_PREFIX_LEN]
        try:
            message = build_message(token, title, body, data, silent)
            message_id = await self._transport.send(message)
        except Exception as exc:
            logger.error(
                "push_send_failed",
                token_prefix=token_prefix,
                title=title,
                silent=silent,
                error=str(exc),
            )
            return False

        logger.info(
            "push_sent",
            token_prefix=token_prefix,
            title=title,
            silent=silent,
            message_id=message_id,
        )
        return True

    async def deliver(self, intent: PushMessage) -> bool:
        return await self.send(
            intent.token, intent.title, intent.body, intent.data, intent.silent
        )

    async def send_all(self, intents: Iterable[PushMessage]) -> int:
        """Deliver intents one at a time; returns how many succeeded."""
        sent = 0
        for intent in intents:
            if await self.deliver(intent):
                sent += 1
        return sent
