"""
gateway/services/presence.py

Instructor presence signals ("on my way", "arrived").

An InstructorNotification document is a one-shot signal: it is deleted
once processed, whether or not a push could be delivered and whether or
not the document could even be parsed.
"""

from typing import Any, Optional

import structlog

from db.store import COLLECTION_INSTRUCTOR_NOTIFICATIONS
from gateway.constants import PRESENCE_ARRIVED, PRESENCE_ON_WAY
from gateway.dependencies import NotificationServices
from gateway.schemas import InstructorNotification, PushMessage
from gateway.services.rendering import render_instructor_presence

logger = structlog.get_logger(__name__)

PRESENCE_TYPES = frozenset({PRESENCE_ON_WAY, PRESENCE_ARRIVED})


async def on_instructor_notification_created(
    notification_id: str,
    data: Optional[dict[str, Any]],
    services: NotificationServices,
) -> list[PushMessage]:
    try:
        record = InstructorNotification.from_data(notification_id, data)
        return await _notify_student(record, services)
    finally:
        await services.store.delete(COLLECTION_INSTRUCTOR_NOTIFICATIONS, notification_id)
        logger.info("instructor_notification_deleted", notification_id=notification_id)


async def _notify_student(
    record: InstructorNotification, services: NotificationServices
) -> list[PushMessage]:
    if not (
        record.instructor_id
        and record.student_id
        and record.lesson_id
        and record.notification_type
    ):
        logger.error(
            "instructor_notification_invalid",
            notification_id=record.id,
            data=record.model_dump(by_alias=True, exclude={"id"}),
        )
        return []

    user = await services.directory.find_user_by_student_id(record.student_id)
    if user is None:
        logger.info("student_user_not_found", student_id=record.student_id)
        return []
    if not user.fcm_token:
        logger.info("fcm_token_missing", student_id=record.student_id)
        return []

    if record.notification_type not in PRESENCE_TYPES:
        logger.error(
            "instructor_notification_type_unknown",
            notification_id=record.id,
            notification_type=record.notification_type,
        )
        return []

    instructor_name = await services.directory.resolve_instructor_name(
        record.instructor_id
    )
    message = render_instructor_presence(
        record.notification_type,
        instructor_name,
        record.lesson_id,
        record.instructor_id,
    )
    intent = PushMessage.for_token(user.fcm_token, message)
    await services.notifier.deliver(intent)

    logger.info(
        "instructor_notification_sent",
        notification_type=record.notification_type,
        student_id=record.student_id,
        instructor_id=record.instructor_id,
    )
    return [intent]
