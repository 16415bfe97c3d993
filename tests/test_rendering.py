"""
tests/test_rendering.py

Unit tests for gateway/services/rendering.py.
Covers date/time formatting, truncation and every message template.
"""

from datetime import datetime, timedelta, timezone

from gateway.services.rendering import (
    format_lesson_date,
    format_lesson_time,
    render_announcement,
    render_cancellation_requested,
    render_cancellation_resolved,
    render_chat_message,
    render_instructor_presence,
    render_lesson_created,
    render_lesson_reminder,
    truncate,
)
from tests.fixtures import TEST_NOW


def test_date_uses_long_weekday_day_and_month() -> None:
    """Dates read like 'Tuesday 21 October'."""
    dt = datetime(2025, 10, 21, 9, 5, tzinfo=timezone.utc)
    assert format_lesson_date(dt) == "Tuesday 21 October"


def test_time_is_zero_padded_24_hour() -> None:
    dt = datetime(2025, 10, 21, 9, 5, 42, tzinfo=timezone.utc)
    assert format_lesson_time(dt) == "09:05"
    assert format_lesson_time(dt.replace(hour=17)) == "17:05"


def test_naive_datetime_is_treated_as_utc() -> None:
    naive = datetime(2025, 10, 21, 23, 30)
    assert format_lesson_time(naive) == "23:30"
    # London is UTC+1 in October before the clocks change
    assert format_lesson_time(naive, "Europe/London") == "00:30"
    assert format_lesson_date(naive, "Europe/London") == "Wednesday 22 October"


def test_truncate_keeps_text_at_limit() -> None:
    assert truncate("a" * 100, 100) == "a" * 100
    assert truncate("", 100) == ""


def test_truncate_cuts_and_appends_ellipsis() -> None:
    """101 characters become exactly 100 plus '...'."""
    result = truncate("b" * 101, 100)
    assert result == "b" * 100 + "..."
    assert len(result) == 103


def test_lesson_created_message() -> None:
    start = datetime(2025, 6, 17, 14, 0, tzinfo=timezone.utc)
    message = render_lesson_created("lesson_1", start)

    assert message.title == "New Lesson Scheduled"
    assert message.body == "You have a new lesson on Tuesday 17 June at 14:00"
    assert message.data == {"type": "lesson_created", "lessonId": "lesson_1"}


def test_cancellation_request_omits_date_when_unknown() -> None:
    message = render_cancellation_requested("req_1", "student_1", "Sam", None)
    assert message.body == "Sam requested to cancel a lesson"

    start = datetime(2025, 6, 17, 14, 0, tzinfo=timezone.utc)
    dated = render_cancellation_requested("req_1", "student_1", "Sam", start)
    assert dated.body == "Sam requested to cancel a lesson on Tuesday 17 June"
    assert dated.data["type"] == "cancellation_request"


def test_cancellation_resolved_titles() -> None:
    approved = render_cancellation_resolved("req_1", "approved")
    declined = render_cancellation_resolved("req_1", "declined")

    assert approved.title == "Cancellation Approved"
    assert approved.body == "Your lesson cancellation has been approved"
    assert declined.title == "Cancellation Declined"
    assert declined.body == "Your lesson cancellation request was declined"
    assert declined.data["status"] == "declined"


def test_instructor_presence_variants() -> None:
    on_way = render_instructor_presence("on_way", "Dave", "lesson_1", "inst_1")
    arrived = render_instructor_presence("arrived", "Dave", "lesson_1", "inst_1")

    assert on_way.title == "Instructor On Way"
    assert on_way.body == "Dave is on their way to you"
    assert arrived.title == "Instructor Arrived"
    assert arrived.body == "Dave has arrived"
    assert render_instructor_presence("snoozed", "Dave", "lesson_1", "inst_1") is None


def test_chat_message_uses_sender_name_and_truncates() -> None:
    message = render_chat_message(
        "conv_1", "msg_1", "inst_1", "instructor", "Dave", "x" * 150
    )
    assert message.title == "Dave"
    assert message.body == "x" * 100 + "..."
    assert message.data["senderRole"] == "instructor"


def test_announcement_defaults_title_and_truncates_at_150() -> None:
    message = render_announcement("ann_1", "school_1", None, "y" * 151)
    assert message.title == "New Announcement"
    assert message.body == "y" * 150 + "..."

    short = render_announcement("ann_1", "school_1", "Closed Monday", "y" * 150)
    assert short.title == "Closed Monday"
    assert short.body == "y" * 150


def test_reminder_starting_soon() -> None:
    start = TEST_NOW + timedelta(hours=1, minutes=30)
    message = render_lesson_reminder("lesson_1", start, TEST_NOW, 1.5)
    assert message.title == "Lesson Reminder"
    assert message.body == "Your lesson is starting soon at 11:30"
    assert message.data == {"type": "lesson_reminder", "lessonId": "lesson_1"}


def test_reminder_same_day_under_12_hours() -> None:
    start = TEST_NOW + timedelta(hours=5)
    message = render_lesson_reminder("lesson_1", start, TEST_NOW, 5)
    assert message.body == "Don't forget your lesson today at 15:00"


def test_reminder_next_day_under_12_hours() -> None:
    """Comparison is by calendar date, so crossing midnight reads 'tomorrow'."""
    late_now = TEST_NOW.replace(hour=20)
    early_start = late_now + timedelta(hours=10)  # 06:00 next day
    message = render_lesson_reminder("lesson_1", early_start, late_now, 10)
    assert message.body == "Don't forget your lesson tomorrow at 06:00"


def test_reminder_far_out_uses_weekday_name() -> None:
    start = TEST_NOW + timedelta(hours=24)  # Monday 10:00
    message = render_lesson_reminder("lesson_1", start, TEST_NOW, 24)
    assert message.body == "Reminder: You have a lesson Monday at 10:00"


def test_reminder_far_out_same_day_says_today() -> None:
    early_now = TEST_NOW.replace(hour=0)
    start = early_now + timedelta(hours=13)
    message = render_lesson_reminder("lesson_1", start, early_now, 13)
    assert message.body == "Reminder: You have a lesson today at 13:00"
