"""
gateway/main.py

FastAPI application entry point for the notification gateway.
Builds the injected store/transport clients once per process and registers
the document-event routes.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI

from config import settings
from gateway.dependencies import build_services
from gateway.routers.events import router as events_router

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle: startup and shutdown."""
    logger.info("gateway_starting", display_timezone=settings.display_timezone)
    app.state.services = build_services(settings)
    yield
    logger.info("gateway_shutting_down")


app = FastAPI(
    title="DriveMate Notifications Gateway",
    description="Turns lesson, chat and announcement events into push notifications",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(events_router)
