"""
gateway/services/cancellations.py

Cancellation request reactions.
- on_cancellation_requested: notify the instructor of a new request
- on_cancellation_resolved: notify the student once the request leaves pending
"""

import structlog

from gateway.constants import STATUS_APPROVED, STATUS_DECLINED, STATUS_PENDING
from gateway.dependencies import NotificationServices
from gateway.schemas import CancellationRequest, PushMessage
from gateway.services.rendering import (
    render_cancellation_requested,
    render_cancellation_resolved,
)

logger = structlog.get_logger(__name__)

RESOLVED_STATUSES = frozenset({STATUS_APPROVED, STATUS_DECLINED})


async def on_cancellation_requested(
    request: CancellationRequest, services: NotificationServices
) -> list[PushMessage]:
    if not request.instructor_id:
        logger.warning("cancellation_request_without_instructor", request_id=request.id)
        return []

    token = await services.directory.resolve_token_by_user_id(request.instructor_id)
    if not token:
        logger.info("fcm_token_missing", instructor_id=request.instructor_id)
        return []

    student_name = await services.directory.resolve_student_name(request.student_id)
    message = render_cancellation_requested(
        request.id,
        request.student_id,
        student_name,
        request.lesson_start_at,
        services.settings.display_timezone,
    )
    intent = PushMessage.for_token(token, message)
    await services.notifier.deliver(intent)
    return [intent]


async def on_cancellation_resolved(
    before: CancellationRequest,
    after: CancellationRequest,
    services: NotificationServices,
) -> list[PushMessage]:
    # Only the pending -> approved/declined transition is announced
    if before.status != STATUS_PENDING or after.status == STATUS_PENDING:
        return []
    if after.status not in RESOLVED_STATUSES:
        logger.warning(
            "cancellation_status_unknown",
            request_id=after.id,
            status=after.status,
        )
        return []

    user = await services.directory.find_user_by_student_id(after.student_id)
    if user is None:
        logger.info("student_user_not_found", student_id=after.student_id)
        return []
    if not user.fcm_token:
        logger.info("fcm_token_missing", user_id=user.id)
        return []

    message = render_cancellation_resolved(after.id, after.status)
    intent = PushMessage.for_token(user.fcm_token, message)
    await services.notifier.deliver(intent)
    return [intent]
