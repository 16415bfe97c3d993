"""
gateway/routers/events.py

Document-change ingress.
Each endpoint receives one store event (creation snapshot or before/after
snapshots plus path parameters), parses it into the domain model and runs
the matching handler. Parse and handler failures are logged and reported in
the response body; the endpoint itself always answers 200 so the event
source does not redeliver in a tight loop.
"""

from typing import Awaitable, Callable

import structlog
from fastapi import APIRouter, Depends

from gateway.dependencies import NotificationServices, get_services
from gateway.schemas import (
    Announcement,
    CancellationRequest,
    ChatMessage,
    DocumentCreatedEvent,
    DocumentUpdatedEvent,
    EventResult,
    Lesson,
    PushMessage,
)
from gateway.services.announcements import on_announcement_created
from gateway.services.cancellations import (
    on_cancellation_requested,
    on_cancellation_resolved,
)
from gateway.services.chat import on_message_created
from gateway.services.lessons import on_lesson_created, on_reflection_added
from gateway.services.presence import on_instructor_notification_created
from gateway.services.reminders import run_lesson_reminders

logger = structlog.get_logger(__name__)

router = APIRouter()


async def _run(
    event_name: str,
    invoke: Callable[[], Awaitable[list[PushMessage]]],
    **event_ids: str,
) -> EventResult:
    """Run a handler, converting any escaped error into a failed result."""
    try:
        intents = await invoke()
    except Exception as exc:
        logger.error(
            "event_handler_failed", handler=event_name, error=str(exc), **event_ids
        )
        return EventResult(status="failed")

    logger.info("event_processed", handler=event_name, sent=len(intents), **event_ids)
    return EventResult(status="processed", sent=len(intents))


@router.post("/events/lessons/{lesson_id}/created")
async def lesson_created(
    lesson_id: str,
    event: DocumentCreatedEvent,
    services: NotificationServices = Depends(get_services),
) -> EventResult:
    return await _run(
        "lesson_created",
        lambda: on_lesson_created(Lesson.from_data(lesson_id, event.value), services),
        lesson_id=lesson_id,
    )


@router.post("/events/lessons/{lesson_id}/updated")
async def lesson_updated(
    lesson_id: str,
    event: DocumentUpdatedEvent,
    services: NotificationServices = Depends(get_services),
) -> EventResult:
    return await _run(
        "reflection_added",
        lambda: on_reflection_added(
            Lesson.from_data(lesson_id, event.before),
            Lesson.from_data(lesson_id, event.after),
            services,
        ),
        lesson_id=lesson_id,
    )


@router.post("/events/cancellation_requests/{request_id}/created")
async def cancellation_request_created(
    request_id: str,
    event: DocumentCreatedEvent,
    services: NotificationServices = Depends(get_services),
) -> EventResult:
    return await _run(
        "cancellation_requested",
        lambda: on_cancellation_requested(
            CancellationRequest.from_data(request_id, event.value), services
        ),
        request_id=request_id,
    )


@router.post("/events/cancellation_requests/{request_id}/updated")
async def cancellation_request_updated(
    request_id: str,
    event: DocumentUpdatedEvent,
    services: NotificationServices = Depends(get_services),
) -> EventResult:
    return await _run(
        "cancellation_resolved",
        lambda: on_cancellation_resolved(
            CancellationRequest.from_data(request_id, event.before),
            CancellationRequest.from_data(request_id, event.after),
            services,
        ),
        request_id=request_id,
    )


@router.post("/events/instructor_notifications/{notification_id}/created")
async def instructor_notification_created(
    notification_id: str,
    event: DocumentCreatedEvent,
    services: NotificationServices = Depends(get_services),
) -> EventResult:
    return await _run(
        "instructor_notification",
        lambda: on_instructor_notification_created(
            notification_id, event.value, services
        ),
        notification_id=notification_id,
    )


@router.post("/events/conversations/{conversation_id}/messages/{message_id}/created")
async def message_created(
    conversation_id: str,
    message_id: str,
    event: DocumentCreatedEvent,
    services: NotificationServices = Depends(get_services),
) -> EventResult:
    return await _run(
        "chat_message",
        lambda: on_message_created(
            conversation_id, ChatMessage.from_data(message_id, event.value), services
        ),
        conversation_id=conversation_id,
        message_id=message_id,
    )


@router.post("/events/school_announcements/{announcement_id}/created")
async def announcement_created(
    announcement_id: str,
    event: DocumentCreatedEvent,
    services: NotificationServices = Depends(get_services),
) -> EventResult:
    return await _run(
        "announcement",
        lambda: on_announcement_created(
            Announcement.from_data(announcement_id, event.value), services
        ),
        announcement_id=announcement_id,
    )


@router.post("/tasks/lesson-reminders")
async def lesson_reminders(
    services: NotificationServices = Depends(get_services),
) -> EventResult:
    """Run one reminder sweep now; the hourly tick itself lives in the worker."""
    return await _run("lesson_reminders", lambda: run_lesson_reminders(services))
