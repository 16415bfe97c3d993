"""
gateway/services/announcements.py

School announcement fan-out.
Every user of the announcement's school receives the push, filtered by
audience and excluding the author. A failed send for one recipient is
logged and the loop moves on.
"""

import structlog

from db.store import COLLECTION_USERS
from gateway.constants import (
    AUDIENCE_ALL,
    AUDIENCE_INSTRUCTORS,
    AUDIENCE_STUDENTS,
    ROLE_INSTRUCTOR,
    ROLE_STUDENT,
)
from gateway.dependencies import NotificationServices
from gateway.schemas import Announcement, PushMessage, User
from gateway.services.rendering import render_announcement

logger = structlog.get_logger(__name__)

_AUDIENCE_ROLES = {
    AUDIENCE_INSTRUCTORS: ROLE_INSTRUCTOR,
    AUDIENCE_STUDENTS: ROLE_STUDENT,
}


def is_recipient(user: User, announcement: Announcement) -> bool:
    """Token present, not the author, and role matches the audience."""
    if not user.fcm_token:
        return False
    if user.id == announcement.author_id:
        return False
    required_role = _AUDIENCE_ROLES.get(announcement.audience or AUDIENCE_ALL)
    if required_role is not None and user.role != required_role:
        return False
    return True


async def on_announcement_created(
    announcement: Announcement, services: NotificationServices
) -> list[PushMessage]:
    if not announcement.school_id:
        logger.warning("announcement_without_school", announcement_id=announcement.id)
        return []

    message = render_announcement(
        announcement.id,
        announcement.school_id,
        announcement.title,
        announcement.body,
    )
    logger.info(
        "announcement_fanout_started",
        announcement_id=announcement.id,
        school_id=announcement.school_id,
        audience=announcement.audience or AUDIENCE_ALL,
        title=message.title,
    )

    snapshots = await services.store.find(
        COLLECTION_USERS, "schoolId", announcement.school_id
    )
    if not snapshots:
        logger.info("school_has_no_users", school_id=announcement.school_id)
        return []

    intents: list[PushMessage] = []
    sent_count = 0
    for snapshot in snapshots:
        try:
            user = User.from_snapshot(snapshot)
            if not is_recipient(user, announcement):
                continue

            intent = PushMessage.for_token(user.fcm_token, message)
            intents.append(intent)
            if await services.notifier.deliver(intent):
                sent_count += 1
        except Exception as exc:
            logger.error(
                "announcement_send_failed",
                announcement_id=announcement.id,
                user_id=snapshot.id,
                error=str(exc),
            )

    logger.info(
        "announcement_fanout_complete",
        announcement_id=announcement.id,
        school_id=announcement.school_id,
        sent_count=sent_count,
        recipients=len(intents),
    )
    return intents
