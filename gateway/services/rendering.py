"""
gateway/services/rendering.py

Pure message rendering for every notification the service sends.
Each render_* function returns a RenderedMessage (title, body, data payload).

Dates and times use one fixed British-English convention regardless of the
server locale: "Tuesday 21 October" and 24-hour "HH:MM".
"""

from datetime import datetime
from typing import Optional

import pytz

from gateway.constants import (
    ANNOUNCEMENT_BODY_MAX_CHARS,
    BODY_CANCELLATION_APPROVED,
    BODY_CANCELLATION_DECLINED,
    CHAT_BODY_MAX_CHARS,
    PRESENCE_ARRIVED,
    PRESENCE_ON_WAY,
    REMINDER_SAME_DAY_HOURS,
    REMINDER_SOON_HOURS,
    STATUS_APPROVED,
    TITLE_ANNOUNCEMENT_DEFAULT,
    TITLE_CANCELLATION_APPROVED,
    TITLE_CANCELLATION_DECLINED,
    TITLE_CANCELLATION_REQUEST,
    TITLE_INSTRUCTOR_ARRIVED,
    TITLE_INSTRUCTOR_ON_WAY,
    TITLE_LESSON_CREATED,
    TITLE_LESSON_REMINDER,
    TITLE_REFLECTION_ADDED,
    TRUNCATION_SUFFIX,
    TYPE_ANNOUNCEMENT,
    TYPE_CANCELLATION_REQUEST,
    TYPE_CANCELLATION_RESPONSE,
    TYPE_CHAT_MESSAGE,
    TYPE_INSTRUCTOR_NOTIFICATION,
    TYPE_LESSON_CREATED,
    TYPE_LESSON_REMINDER,
    TYPE_REFLECTION_ADDED,
)
from gateway.schemas import RenderedMessage

DAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


# ── Formatting helpers ───────────────────────────────────────


def to_display_time(dt: datetime, tz_name: str = "UTC") -> datetime:
    """Convert an instant to the display timezone (naive datetimes are UTC)."""
    if dt.tzinfo is None:
        dt = pytz.UTC.localize(dt)
    return dt.astimezone(pytz.timezone(tz_name))


def format_lesson_date(dt: datetime, tz_name: str = "UTC") -> str:
    """Format as 'Tuesday 21 October'."""
    local = to_display_time(dt, tz_name)
    return f"{DAY_NAMES[local.weekday()]} {local.day} {MONTH_NAMES[local.month - 1]}"


def format_lesson_time(dt: datetime, tz_name: str = "UTC") -> str:
    """Format as zero-padded 24-hour 'HH:MM'."""
    local = to_display_time(dt, tz_name)
    return f"{local.hour:02d}:{local.minute:02d}"


def format_weekday(dt: datetime, tz_name: str = "UTC") -> str:
    return DAY_NAMES[to_display_time(dt, tz_name).weekday()]


def truncate(text: str, limit: int) -> str:
    """Cut text to `limit` characters and append an ellipsis when longer."""
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_SUFFIX


def is_same_calendar_day(a: datetime, b: datetime, tz_name: str = "UTC") -> bool:
    return to_display_time(a, tz_name).date() == to_display_time(b, tz_name).date()


# ── Event templates ──────────────────────────────────────────


def render_lesson_created(
    lesson_id: str, start_at: datetime, tz_name: str = "UTC"
) -> RenderedMessage:
    date_str = format_lesson_date(start_at, tz_name)
    time_str = format_lesson_time(start_at, tz_name)
    return RenderedMessage(
        title=TITLE_LESSON_CREATED,
        body=f"You have a new lesson on {date_str} at {time_str}",
        data={"type": TYPE_LESSON_CREATED, "lessonId": lesson_id},
    )


def render_reflection_added(
    lesson_id: str, student_id: Optional[str], student_name: str
) -> RenderedMessage:
    return RenderedMessage(
        title=TITLE_REFLECTION_ADDED,
        body=f"{student_name} added a reflection for their lesson",
        data={
            "type": TYPE_REFLECTION_ADDED,
            "lessonId": lesson_id,
            "studentId": student_id,
        },
    )


def render_cancellation_requested(
    request_id: str,
    student_id: Optional[str],
    student_name: str,
    lesson_start_at: Optional[datetime],
    tz_name: str = "UTC",
) -> RenderedMessage:
    # Date clause is dropped when the lesson time is unknown
    date_clause = ""
    if lesson_start_at is not None:
        date_clause = f" on {format_lesson_date(lesson_start_at, tz_name)}"
    return RenderedMessage(
        title=TITLE_CANCELLATION_REQUEST,
        body=f"{student_name} requested to cancel a lesson{date_clause}",
        data={
            "type": TYPE_CANCELLATION_REQUEST,
            "requestId": request_id,
            "studentId": student_id,
        },
    )


def render_cancellation_resolved(request_id: str, status: str) -> RenderedMessage:
    approved = status == STATUS_APPROVED
    return RenderedMessage(
        title=TITLE_CANCELLATION_APPROVED if approved else TITLE_CANCELLATION_DECLINED,
        body=BODY_CANCELLATION_APPROVED if approved else BODY_CANCELLATION_DECLINED,
        data={
            "type": TYPE_CANCELLATION_RESPONSE,
            "requestId": request_id,
            "status": status,
        },
    )


def render_instructor_presence(
    notification_type: str,
    instructor_name: str,
    lesson_id: str,
    instructor_id: str,
) -> Optional[RenderedMessage]:
    """Return None for a notification type outside on_way/arrived."""
    if notification_type == PRESENCE_ON_WAY:
        title = TITLE_INSTRUCTOR_ON_WAY
        body = f"{instructor_name} is on their way to you"
    elif notification_type == PRESENCE_ARRIVED:
        title = TITLE_INSTRUCTOR_ARRIVED
        body = f"{instructor_name} has arrived"
    else:
        return None

    return RenderedMessage(
        title=title,
        body=body,
        data={
            "type": TYPE_INSTRUCTOR_NOTIFICATION,
            "notificationType": notification_type,
            "lessonId": lesson_id,
            "instructorId": instructor_id,
        },
    )


def render_chat_message(
    conversation_id: str,
    message_id: str,
    sender_id: str,
    sender_role: str,
    sender_name: str,
    text: str,
) -> RenderedMessage:
    return RenderedMessage(
        title=sender_name,
        body=truncate(text, CHAT_BODY_MAX_CHARS),
        data={
            "type": TYPE_CHAT_MESSAGE,
            "conversationId": conversation_id,
            "messageId": message_id,
            "senderId": sender_id,
            "senderRole": sender_role,
        },
    )


def render_announcement(
    announcement_id: str,
    school_id: str,
    title: Optional[str],
    body: Optional[str],
) -> RenderedMessage:
    return RenderedMessage(
        title=title or TITLE_ANNOUNCEMENT_DEFAULT,
        body=truncate(body or "", ANNOUNCEMENT_BODY_MAX_CHARS),
        data={
            "type": TYPE_ANNOUNCEMENT,
            "announcementId": announcement_id,
            "schoolId": school_id,
        },
    )


def render_lesson_reminder(
    lesson_id: str,
    start_at: datetime,
    now: datetime,
    hours_until: float,
    tz_name: str = "UTC",
) -> RenderedMessage:
    """
    Render the reminder body, tiered by how soon the lesson starts.

    < 2h:  "starting soon"
    < 12h: "today" / "tomorrow"
    else:  "today" / weekday name
    """
    time_str = format_lesson_time(start_at, tz_name)
    same_day = is_same_calendar_day(start_at, now, tz_name)

    if hours_until < REMINDER_SOON_HOURS:
        body = f"Your lesson is starting soon at {time_str}"
    elif hours_until < REMINDER_SAME_DAY_HOURS:
        day_phrase = "today" if same_day else "tomorrow"
        body = f"Don't forget your lesson {day_phrase} at {time_str}"
    else:
        day_phrase = "today" if same_day else format_weekday(start_at, tz_name)
        body = f"Reminder: You have a lesson {day_phrase} at {time_str}"

    return RenderedMessage(
        title=TITLE_LESSON_REMINDER,
        body=body,
        data={"type": TYPE_LESSON_REMINDER, "lessonId": lesson_id},
    )
