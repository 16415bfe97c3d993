"""
worker/main.py

Celery worker and beat entry point.
Defines the Celery app, the hourly beat schedule and the task that runs
one lesson reminder sweep.
"""

import asyncio
from typing import Optional

import structlog
from celery import Celery
from celery.schedules import crontab
from celery.signals import worker_process_init

from config import settings

logger = structlog.get_logger(__name__)

celery_app = Celery(
    "worker",
    broker=settings.redis_url,
    backend=settings.redis_url,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    beat_schedule={
        "lesson-reminders-hourly": {
            "task": "worker.tasks.run_lesson_reminders",
            "schedule": crontab(minute=settings.reminder_sweep_minute),
        },
    },
)

# The Firestore async client is cached per Firebase app and bound to the
# loop it was first used on, so every sweep in a process shares this loop.
_loop: Optional[asyncio.AbstractEventLoop] = None


def get_event_loop() -> asyncio.AbstractEventLoop:
    global _loop
    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()
    return _loop


@worker_process_init.connect
def _init_worker_loop(**kwargs) -> None:
    """Forked children must not reuse the parent's loop."""
    global _loop
    _loop = asyncio.new_event_loop()
    logger.info("worker_event_loop_created")


async def _run_sweep() -> int:
    """Async entrypoint that wires the clients and runs one sweep."""
    from gateway.dependencies import build_services
    from gateway.services.reminders import run_lesson_reminders

    services = build_services(settings)
    intents = await run_lesson_reminders(services)
    return len(intents)


@celery_app.task(name="worker.tasks.run_lesson_reminders")
def run_lesson_reminders() -> int:
    """
    Celery task fired by beat once an hour.

    Drives the sweep on the process-wide event loop to bridge Celery's sync
    interface with the async store and push clients. Returns the number of
    reminders sent.
    """
    try:
        sent = get_event_loop().run_until_complete(_run_sweep())
    except Exception as exc:
        logger.error("lesson_reminder_sweep_failed", error=str(exc))
        return 0

    logger.info("lesson_reminder_sweep_complete", sent=sent)
    return sent
