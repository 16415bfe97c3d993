"""
gateway/services/lessons.py

Lesson document reactions.
- on_lesson_created: tell the student a lesson was booked
- on_reflection_added: tell the instructor the student wrote a reflection
"""

from typing import Optional

import structlog

from gateway.dependencies import NotificationServices
from gateway.schemas import Lesson, PushMessage
from gateway.services.rendering import render_lesson_created, render_reflection_added

logger = structlog.get_logger(__name__)


def _has_text(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def is_new_reflection(before: Optional[str], after: Optional[str]) -> bool:
    """
    A reflection counts as new when the updated text is non-blank and either
    there was none before or it changed. Clearing a reflection never counts.
    """
    if not _has_text(after):
        return False
    if _has_text(before) and before == after:
        return False
    return True


async def on_lesson_created(
    lesson: Lesson, services: NotificationServices
) -> list[PushMessage]:
    if not lesson.student_id:
        logger.warning("lesson_created_without_student", lesson_id=lesson.id)
        return []

    user = await services.directory.find_user_by_student_id(lesson.student_id)
    if user is None:
        logger.info("student_user_not_found", student_id=lesson.student_id)
        return []
    if not user.fcm_token:
        logger.info("fcm_token_missing", user_id=user.id)
        return []

    if lesson.start_at is None:
        logger.warning("lesson_created_without_start", lesson_id=lesson.id)
        return []

    message = render_lesson_created(
        lesson.id, lesson.start_at, services.settings.display_timezone
    )
    intent = PushMessage.for_token(user.fcm_token, message)
    await services.notifier.deliver(intent)
    return [intent]


async def on_reflection_added(
    before: Lesson, after: Lesson, services: NotificationServices
) -> list[PushMessage]:
    if not is_new_reflection(before.student_reflection, after.student_reflection):
        return []

    if not after.instructor_id:
        logger.warning("reflection_without_instructor", lesson_id=after.id)
        return []

    token = await services.directory.resolve_token_by_user_id(after.instructor_id)
    if not token:
        logger.info("fcm_token_missing", instructor_id=after.instructor_id)
        return []

    student_name = await services.directory.resolve_student_name(after.student_id)
    message = render_reflection_added(after.id, after.student_id, student_name)
    intent = PushMessage.for_token(token, message)
    await services.notifier.deliver(intent)
    return [intent]
