"""
db/store.py

Document store access for the notification service.
Defines the DocumentStore contract the handlers depend on and its
Firestore implementation backed by firebase-admin's async client.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

import firebase_admin
import structlog
from firebase_admin import credentials, firestore_async
from google.cloud.firestore_v1.base_query import FieldFilter

from config import Settings

logger = structlog.get_logger(__name__)

# ── Collection names ─────────────────────────────────────────
COLLECTION_USERS = "users"
COLLECTION_STUDENTS = "students"
COLLECTION_LESSONS = "lessons"
COLLECTION_CANCELLATION_REQUESTS = "cancellation_requests"
COLLECTION_INSTRUCTOR_NOTIFICATIONS = "instructor_notifications"
COLLECTION_CONVERSATIONS = "conversations"
COLLECTION_MESSAGES = "messages"  # nested under conversations/{id}
COLLECTION_ANNOUNCEMENTS = "school_announcements"


@dataclass(frozen=True)
class DocumentSnapshot:
    """Immutable view of a single stored document."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)


class DocumentStore(Protocol):
    """Operations the dispatch engine needs from the document store."""

    async def get(self, collection: str, doc_id: str) -> Optional[DocumentSnapshot]:
        ...

    async def find(
        self,
        collection: str,
        field_name: str,
        value: Any,
        limit: Optional[int] = None,
    ) -> list[DocumentSnapshot]:
        ...

    async def find_between(
        self,
        collection: str,
        field_name: str,
        start: datetime,
        end: datetime,
        where_in: Optional[tuple[str, Sequence[Any]]] = None,
    ) -> list[DocumentSnapshot]:
        ...

    async def delete(self, collection: str, doc_id: str) -> None:
        ...


def init_firebase_app(settings: Settings) -> firebase_admin.App:
    """Initialise (or reuse) the default Firebase app for this process."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    if settings.firebase_credentials_path:
        credential = credentials.Certificate(settings.firebase_credentials_path)
    else:
        credential = credentials.ApplicationDefault()

    options = {}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id

    app = firebase_admin.initialize_app(credential, options or None)
    logger.info(
        "firebase_app_initialized",
        project_id=settings.firebase_project_id or "default",
    )
    return app


class FirestoreStore:
    """DocumentStore implementation over the async Firestore client."""

    def __init__(self, app: firebase_admin.App) -> None:
        self._db = firestore_async.client(app)

    async def get(self, collection: str, doc_id: str) -> Optional[DocumentSnapshot]:
        if not doc_id:
            return None
        doc = await self._db.collection(collection).document(doc_id).get()
        if not doc.exists:
            return None
        return DocumentSnapshot(id=doc.id, data=doc.to_dict() or {})

    async def find(
        self,
        collection: str,
        field_name: str,
        value: Any,
        limit: Optional[int] = None,
    ) -> list[DocumentSnapshot]:
        query = self._db.collection(collection).where(
            filter=FieldFilter(field_name, "==", value)
        )
        if limit is not None:
            query = query.limit(limit)
        return [
            DocumentSnapshot(id=doc.id, data=doc.to_dict() or {})
            async for doc in query.stream()
        ]

    async def find_between(
        self,
        collection: str,
        field_name: str,
        start: datetime,
        end: datetime,
        where_in: Optional[tuple[str, Sequence[Any]]] = None,
    ) -> list[DocumentSnapshot]:
        query = (
            self._db.collection(collection)
            .where(filter=FieldFilter(field_name, ">=", start))
            .where(filter=FieldFilter(field_name, "<=", end))
        )
        if where_in is not None:
            in_field, values = where_in
            query = query.where(filter=FieldFilter(in_field, "in", list(values)))
        return [
            DocumentSnapshot(id=doc.id, data=doc.to_dict() or {})
            async for doc in query.stream()
        ]

    async def delete(self, collection: str, doc_id: str) -> None:
        await self._db.collection(collection).document(doc_id).delete()
