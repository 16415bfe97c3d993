"""
tests/fixtures.py

Shared test data and helper functions for constructing test payloads.
Provides an in-memory DocumentStore and a recording push transport so
handlers can be exercised without Firestore or FCM.
"""

from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from config import Settings
from db.store import COLLECTION_STUDENTS, COLLECTION_USERS, DocumentSnapshot
from gateway.dependencies import NotificationServices

# ── Fixed clock ─────────────────────────────────────────────

# Sunday 15 June 2025, 10:00 UTC
TEST_NOW: datetime = datetime(2025, 6, 15, 10, 0, 0, tzinfo=timezone.utc)

TEST_STUDENT_ID: str = "student_001"
TEST_STUDENT_USER_ID: str = "user_student_001"
TEST_INSTRUCTOR_ID: str = "user_instructor_001"
TEST_SCHOOL_ID: str = "school_001"


class InMemoryStore:
    """DocumentStore backed by nested dicts: {collection: {doc_id: data}}."""

    def __init__(self, collections: Optional[dict[str, dict[str, dict]]] = None):
        self.collections: dict[str, dict[str, dict]] = {
            name: dict(docs) for name, docs in (collections or {}).items()
        }
        self.deleted: list[tuple[str, str]] = []

    def put(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self.collections.setdefault(collection, {})[doc_id] = data

    async def get(self, collection: str, doc_id: str) -> Optional[DocumentSnapshot]:
        data = self.collections.get(collection, {}).get(doc_id)
        if data is None:
            return None
        return DocumentSnapshot(id=doc_id, data=dict(data))

    async def find(
        self,
        collection: str,
        field_name: str,
        value: Any,
        limit: Optional[int] = None,
    ) -> list[DocumentSnapshot]:
        matches = [
            DocumentSnapshot(id=doc_id, data=dict(data))
            for doc_id, data in self.collections.get(collection, {}).items()
            if data.get(field_name) == value
        ]
        return matches[:limit] if limit is not None else matches

    async def find_between(
        self,
        collection: str,
        field_name: str,
        start: datetime,
        end: datetime,
        where_in: Optional[tuple[str, Sequence[Any]]] = None,
    ) -> list[DocumentSnapshot]:
        results = []
        for doc_id, data in self.collections.get(collection, {}).items():
            value = data.get(field_name)
            if value is None or not (start <= value <= end):
                continue
            if where_in is not None:
                in_field, values = where_in
                if data.get(in_field) not in values:
                    continue
            results.append(DocumentSnapshot(id=doc_id, data=dict(data)))
        return results

    async def delete(self, collection: str, doc_id: str) -> None:
        self.collections.get(collection, {}).pop(doc_id, None)
        self.deleted.append((collection, doc_id))


class RecordingTransport:
    """PushTransport that records messages and fails for chosen tokens."""

    def __init__(self, failing_tokens: Sequence[str] = ()):
        self.sent: list = []
        self.failing_tokens = set(failing_tokens)

    async def send(self, message) -> str:
        if message.token in self.failing_tokens:
            raise RuntimeError(f"registration token not registered: {message.token}")
        self.sent.append(message)
        return f"projects/test/messages/{len(self.sent)}"

    @property
    def tokens(self) -> list[str]:
        return [message.token for message in self.sent]


def build_settings(**overrides: Any) -> Settings:
    """Build Settings with test defaults, ignoring any local .env file."""
    values: dict[str, Any] = {
        "firebase_project_id": "test-project",
        "display_timezone": "UTC",
        "reminder_lookahead_hours": 24,
        "default_reminder_hours_before": 24,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def build_services(
    store: Optional[InMemoryStore] = None,
    transport: Optional[RecordingTransport] = None,
    **settings_overrides: Any,
) -> NotificationServices:
    return NotificationServices.create(
        store=store if store is not None else InMemoryStore(),
        transport=transport if transport is not None else RecordingTransport(),
        settings=build_settings(**settings_overrides),
    )


def build_user(
    role: str = "student",
    fcm_token: Optional[str] = "token_student_001",
    student_id: Optional[str] = TEST_STUDENT_ID,
    school_id: Optional[str] = TEST_SCHOOL_ID,
    name: Optional[str] = None,
    reminder_hours_before: Optional[float] = None,
) -> dict[str, Any]:
    """Build a users/{id} document with camelCase keys."""
    data: dict[str, Any] = {"role": role, "schoolId": school_id}
    if fcm_token is not None:
        data["fcmToken"] = fcm_token
    if student_id is not None:
        data["studentId"] = student_id
    if name is not None:
        data["name"] = name
    if reminder_hours_before is not None:
        data["reminderHoursBefore"] = reminder_hours_before
    return data


def build_instructor(
    fcm_token: Optional[str] = "token_instructor_001",
    name: Optional[str] = "Dave Driver",
    reminder_hours_before: Optional[float] = None,
) -> dict[str, Any]:
    return build_user(
        role="instructor",
        fcm_token=fcm_token,
        student_id=None,
        name=name,
        reminder_hours_before=reminder_hours_before,
    )


def seeded_store(
    student_token: Optional[str] = "token_student_001",
    instructor_token: Optional[str] = "token_instructor_001",
    student_name: Optional[str] = "Sam Learner",
    instructor_name: Optional[str] = "Dave Driver",
    reminder_hours_before: Optional[float] = None,
) -> InMemoryStore:
    """A store with one instructor, one student record and its linked user."""
    store = InMemoryStore()
    store.put(
        COLLECTION_USERS,
        TEST_STUDENT_USER_ID,
        build_user(fcm_token=student_token),
    )
    store.put(
        COLLECTION_USERS,
        TEST_INSTRUCTOR_ID,
        build_instructor(
            fcm_token=instructor_token,
            name=instructor_name,
            reminder_hours_before=reminder_hours_before,
        ),
    )
    student: dict[str, Any] = {}
    if student_name is not None:
        student["name"] = student_name
    store.put(COLLECTION_STUDENTS, TEST_STUDENT_ID, student)
    return store
