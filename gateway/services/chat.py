"""
gateway/services/chat.py

Chat message reaction: notify the other participant of the conversation.
Delivered as a silent data-only push so the app can render its own
notification with reply and mark-read actions.
"""

from typing import Optional

import structlog

from db.store import COLLECTION_CONVERSATIONS
from gateway.constants import ROLE_INSTRUCTOR
from gateway.dependencies import NotificationServices
from gateway.schemas import ChatMessage, Conversation, PushMessage
from gateway.services.rendering import render_chat_message

logger = structlog.get_logger(__name__)


async def on_message_created(
    conversation_id: str,
    message: ChatMessage,
    services: NotificationServices,
) -> list[PushMessage]:
    if not (message.sender_id and message.sender_role and conversation_id):
        logger.warning(
            "chat_message_incomplete",
            conversation_id=conversation_id,
            message_id=message.id,
        )
        return []

    snapshot = await services.store.get(COLLECTION_CONVERSATIONS, conversation_id)
    if snapshot is None:
        logger.warning("conversation_not_found", conversation_id=conversation_id)
        return []
    conversation = Conversation.from_snapshot(snapshot)

    from_instructor = message.sender_role == ROLE_INSTRUCTOR
    recipient_id = (
        conversation.student_id if from_instructor else conversation.instructor_id
    )
    if not recipient_id:
        logger.warning("chat_recipient_missing", conversation_id=conversation_id)
        return []

    # Students are addressed through their linked user profile
    token: Optional[str]
    if from_instructor:
        token = await services.directory.resolve_token_by_student_id(recipient_id)
    else:
        token = await services.directory.resolve_token_by_user_id(recipient_id)

    if not token:
        logger.info("fcm_token_missing", recipient_id=recipient_id)
        return []

    if from_instructor:
        sender_name = await services.directory.resolve_instructor_name(
            message.sender_id
        )
    else:
        sender_name = await services.directory.resolve_student_name(message.sender_id)

    rendered = render_chat_message(
        conversation_id,
        message.id,
        message.sender_id,
        message.sender_role,
        sender_name,
        message.text or "",
    )
    intent = PushMessage.for_token(token, rendered, silent=True)
    await services.notifier.deliver(intent)

    logger.info(
        "chat_notification_sent",
        recipient_id=recipient_id,
        sender_id=message.sender_id,
        conversation_id=conversation_id,
    )
    return [intent]
