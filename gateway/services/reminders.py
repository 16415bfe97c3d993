"""
gateway/services/reminders.py

Hourly lesson reminder sweep.

Scans lessons starting within the lookahead window and sends each student
one reminder as the lesson crosses the instructor's configured lead time.
The eligibility window is one hour wide to match the hourly tick; a tick
that arrives more than an hour late misses that reminder. Lessons are
processed sequentially so the per-run dedup set needs no locking. A lesson
that fails (malformed document, lookup error) is logged and skipped.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog

from db.store import COLLECTION_LESSONS, DocumentSnapshot
from gateway.constants import REMINDER_WINDOW_WIDTH_HOURS, STATUS_SCHEDULED
from gateway.dependencies import NotificationServices
from gateway.schemas import Lesson, PushMessage, User
from gateway.services.rendering import render_lesson_reminder

logger = structlog.get_logger(__name__)

SECONDS_PER_HOUR: int = 3600


def reminder_lead_hours(instructor: User, default_hours: float) -> float:
    """Instructor's reminderHoursBefore, or the default when unset or zero."""
    return instructor.reminder_hours_before or default_hours


def is_within_reminder_window(hours_until: float, lead_hours: float) -> bool:
    return lead_hours - REMINDER_WINDOW_WIDTH_HOURS <= hours_until <= lead_hours


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / SECONDS_PER_HOUR


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


async def run_lesson_reminders(
    services: NotificationServices,
    now: Optional[datetime] = None,
) -> list[PushMessage]:
    """
    Run one reminder sweep.

    Returns the reminders sent during this run. At most one reminder is
    sent per student per run even with several qualifying lessons.
    """
    settings = services.settings
    now = _as_utc(now or datetime.now(timezone.utc))
    window_end = now + timedelta(hours=settings.reminder_lookahead_hours)

    logger.info("lesson_reminders_started", now=now.isoformat())

    snapshots = await services.store.find_between(
        COLLECTION_LESSONS,
        "startAt",
        now,
        window_end,
        where_in=("status", [STATUS_SCHEDULED, None]),
    )
    logger.info("upcoming_lessons_found", count=len(snapshots))

    reminded_students: set[str] = set()
    intents: list[PushMessage] = []

    for snapshot in snapshots:
        try:
            intent = await _remind_student(
                snapshot, services, now, reminded_students
            )
        except Exception as exc:
            logger.error(
                "lesson_reminder_failed", lesson_id=snapshot.id, error=str(exc)
            )
            continue
        if intent is not None:
            intents.append(intent)

    logger.info("lesson_reminders_complete", sent=len(reminded_students))
    return intents


async def _remind_student(
    snapshot: DocumentSnapshot,
    services: NotificationServices,
    now: datetime,
    reminded_students: set[str],
) -> Optional[PushMessage]:
    """Send the reminder for one lesson if it is due; None when skipped."""
    settings = services.settings
    lesson = Lesson.from_snapshot(snapshot)
    if not (lesson.student_id and lesson.instructor_id and lesson.start_at):
        return None
    if lesson.student_id in reminded_students:
        return None

    instructor = await services.directory.get_user(lesson.instructor_id)
    if instructor is None:
        logger.info("instructor_not_found", instructor_id=lesson.instructor_id)
        return None

    lead_hours = reminder_lead_hours(
        instructor, settings.default_reminder_hours_before
    )
    start_at = _as_utc(lesson.start_at)
    hours_until = hours_between(now, start_at)
    if not is_within_reminder_window(hours_until, lead_hours):
        return None

    token = await services.directory.resolve_token_by_student_id(lesson.student_id)
    if not token:
        return None

    message = render_lesson_reminder(
        lesson.id,
        start_at,
        now,
        hours_until,
        settings.display_timezone,
    )
    intent = PushMessage.for_token(token, message)
    await services.notifier.deliver(intent)

    reminded_students.add(lesson.student_id)
    logger.info(
        "lesson_reminder_sent",
        student_id=lesson.student_id,
        lesson_id=lesson.id,
        start_at=start_at.isoformat(),
    )
    return intent
