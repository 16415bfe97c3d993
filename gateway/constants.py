"""
gateway/constants.py

Fixed values used by the notification dispatch engine.
Titles, fallback names, truncation limits and payload type discriminators
must be referenced from this module; no literals in handler logic.
"""

# ── Fallback display names ───────────────────────────────────
FALLBACK_STUDENT_NAME: str = "Student"
FALLBACK_INSTRUCTOR_NAME: str = "Your instructor"

# ── Notification titles ──────────────────────────────────────
TITLE_LESSON_CREATED: str = "New Lesson Scheduled"
TITLE_REFLECTION_ADDED: str = "New Lesson Reflection"
TITLE_CANCELLATION_REQUEST: str = "Cancellation Request"
TITLE_CANCELLATION_APPROVED: str = "Cancellation Approved"
TITLE_CANCELLATION_DECLINED: str = "Cancellation Declined"
TITLE_INSTRUCTOR_ON_WAY: str = "Instructor On Way"
TITLE_INSTRUCTOR_ARRIVED: str = "Instructor Arrived"
TITLE_ANNOUNCEMENT_DEFAULT: str = "New Announcement"
TITLE_LESSON_REMINDER: str = "Lesson Reminder"

# ── Fixed bodies ─────────────────────────────────────────────
BODY_CANCELLATION_APPROVED: str = "Your lesson cancellation has been approved"
BODY_CANCELLATION_DECLINED: str = "Your lesson cancellation request was declined"

# ── Truncation limits (characters) ───────────────────────────
CHAT_BODY_MAX_CHARS: int = 100
ANNOUNCEMENT_BODY_MAX_CHARS: int = 150
TRUNCATION_SUFFIX: str = "..."

# ── Reminder urgency tiers (hours until lesson) ──────────────
REMINDER_SOON_HOURS: float = 2
REMINDER_SAME_DAY_HOURS: float = 12
REMINDER_WINDOW_WIDTH_HOURS: float = 1

# ── Data payload type discriminators ─────────────────────────
TYPE_LESSON_CREATED: str = "lesson_created"
TYPE_REFLECTION_ADDED: str = "reflection_added"
TYPE_CANCELLATION_REQUEST: str = "cancellation_request"
TYPE_CANCELLATION_RESPONSE: str = "cancellation_response"
TYPE_INSTRUCTOR_NOTIFICATION: str = "instructor_notification"
TYPE_CHAT_MESSAGE: str = "chat_message"
TYPE_ANNOUNCEMENT: str = "announcement"
TYPE_LESSON_REMINDER: str = "lesson_reminder"

# ── Domain enum values ───────────────────────────────────────
ROLE_INSTRUCTOR: str = "instructor"
ROLE_STUDENT: str = "student"

STATUS_PENDING: str = "pending"
STATUS_APPROVED: str = "approved"
STATUS_DECLINED: str = "declined"
STATUS_SCHEDULED: str = "scheduled"

PRESENCE_ON_WAY: str = "on_way"
PRESENCE_ARRIVED: str = "arrived"

AUDIENCE_ALL: str = "all"
AUDIENCE_INSTRUCTORS: str = "instructors"
AUDIENCE_STUDENTS: str = "students"

# ── Push delivery (FCM) ──────────────────────────────────────
ANDROID_CLICK_ACTION: str = "FLUTTER_NOTIFICATION_CLICK"
ANDROID_CHANNEL_ID: str = "default"
PUSH_SOUND: str = "default"
TOKEN_LOG_PREFIX_LEN: int = 10
