"""
gateway/services/directory.py

Identity lookups against the document store.
Resolves user ids and student ids to push tokens and display names.

Students are joined through the `studentId` field on the user profile,
which is a different id space from the user document id. Missing names
fall back to fixed display names so a lookup never aborts a send.
"""

from typing import Optional

import structlog

from db.store import COLLECTION_STUDENTS, COLLECTION_USERS, DocumentStore
from gateway.constants import FALLBACK_INSTRUCTOR_NAME, FALLBACK_STUDENT_NAME
from gateway.schemas import Student, User

logger = structlog.get_logger(__name__)


class Directory:
    """Point reads and single-field queries for users and students."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def get_user(self, user_id: Optional[str]) -> Optional[User]:
        if not user_id:
            return None
        snapshot = await self._store.get(COLLECTION_USERS, user_id)
        if snapshot is None:
            return None
        return User.from_snapshot(snapshot)

    async def find_user_by_student_id(self, student_id: Optional[str]) -> Optional[User]:
        """Return the user profile linked to a student record, first match wins."""
        if not student_id:
            return None
        matches = await self._store.find(
            COLLECTION_USERS, "studentId", student_id, limit=1
        )
        if not matches:
            return None
        return User.from_snapshot(matches[0])

    async def resolve_token_by_user_id(self, user_id: Optional[str]) -> Optional[str]:
        user = await self.get_user(user_id)
        if user is None:
            return None
        return user.fcm_token or None

    async def resolve_token_by_student_id(
        self, student_id: Optional[str]
    ) -> Optional[str]:
        user = await self.find_user_by_student_id(student_id)
        if user is None:
            return None
        return user.fcm_token or None

    async def resolve_student_name(self, student_id: Optional[str]) -> str:
        if not student_id:
            return FALLBACK_STUDENT_NAME
        snapshot = await self._store.get(COLLECTION_STUDENTS, student_id)
        if snapshot is None:
            return FALLBACK_STUDENT_NAME
        return Student.from_snapshot(snapshot).name or FALLBACK_STUDENT_NAME

    async def resolve_instructor_name(self, instructor_id: Optional[str]) -> str:
        user = await self.get_user(instructor_id)
        if user is None:
            return FALLBACK_INSTRUCTOR_NAME
        return user.name or FALLBACK_INSTRUCTOR_NAME
