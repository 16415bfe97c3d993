"""
gateway/schemas.py

Pydantic data models for the notification dispatch engine.
- Domain documents (User, Lesson, CancellationRequest, ...) parsed from
  camelCase store snapshots; every field optional, unknown fields ignored
- Event envelopes received by the HTTP ingress
- RenderedMessage / PushMessage: rendered content and delivery intents
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from db.store import DocumentSnapshot


class StoreDocument(BaseModel):
    """Base for documents read from the store (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    id: str = ""

    @classmethod
    def from_snapshot(cls, snapshot: DocumentSnapshot):
        return cls.model_validate({**snapshot.data, "id": snapshot.id})

    @classmethod
    def from_data(cls, doc_id: str, data: Optional[dict[str, Any]]):
        return cls.model_validate({**(data or {}), "id": doc_id})


class User(StoreDocument):
    """App user profile; the push token of record."""

    role: Optional[str] = None
    name: Optional[str] = None
    fcm_token: Optional[str] = None
    student_id: Optional[str] = None
    school_id: Optional[str] = None
    reminder_hours_before: Optional[float] = None


class Student(StoreDocument):
    name: Optional[str] = None


class Lesson(StoreDocument):
    student_id: Optional[str] = None
    instructor_id: Optional[str] = None
    start_at: Optional[datetime] = None
    status: Optional[str] = None
    student_reflection: Optional[str] = None


class CancellationRequest(StoreDocument):
    instructor_id: Optional[str] = None
    student_id: Optional[str] = None
    lesson_start_at: Optional[datetime] = None
    status: Optional[str] = None


class InstructorNotification(StoreDocument):
    """Transient on_way/arrived signal written by the instructor app."""

    instructor_id: Optional[str] = None
    student_id: Optional[str] = None
    lesson_id: Optional[str] = None
    notification_type: Optional[str] = None


class Conversation(StoreDocument):
    instructor_id: Optional[str] = None
    student_id: Optional[str] = None


class ChatMessage(StoreDocument):
    sender_id: Optional[str] = None
    sender_role: Optional[str] = None
    text: Optional[str] = None


class Announcement(StoreDocument):
    school_id: Optional[str] = None
    audience: Optional[str] = None
    title: Optional[str] = None
    body: Optional[str] = None
    author_id: Optional[str] = None


# ── Event envelopes (HTTP ingress) ───────────────────────────


class DocumentCreatedEvent(BaseModel):
    """Creation event: the new document's data."""

    value: dict[str, Any] = Field(default_factory=dict)


class DocumentUpdatedEvent(BaseModel):
    """Update event: document data before and after the write."""

    before: dict[str, Any] = Field(default_factory=dict)
    after: dict[str, Any] = Field(default_factory=dict)


# ── Rendering / delivery ─────────────────────────────────────


class RenderedMessage(BaseModel):
    """Notification content produced by the renderer."""

    title: str
    body: str
    data: dict[str, Any] = Field(default_factory=dict)


class PushMessage(BaseModel):
    """A delivery intent: one notification for one device token."""

    token: str
    title: str
    body: str
    data: dict[str, Any] = Field(default_factory=dict)
    silent: bool = False

    @classmethod
    def for_token(
        cls, token: str, message: RenderedMessage, silent: bool = False
    ) -> "PushMessage":
        return cls(
            token=token,
            title=message.title,
            body=message.body,
            data=message.data,
            silent=silent,
        )


class EventResult(BaseModel):
    """Response body returned by the ingress for each processed event."""

    status: str
    sent: int = 0
