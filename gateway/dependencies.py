"""
gateway/dependencies.py

Process-scoped collaborators shared by every handler.
The store and push transport are constructed once and injected; handlers
never reach for module-level Firebase clients.
"""

from dataclasses import dataclass

from fastapi import Request

from config import Settings
from db.store import DocumentStore, FirestoreStore, init_firebase_app
from gateway.services.directory import Directory
from gateway.services.notification import FcmTransport, PushNotifier, PushTransport


@dataclass
class NotificationServices:
    """Injected clients for one process."""

    store: DocumentStore
    directory: Directory
    notifier: PushNotifier
    settings: Settings

    @classmethod
    def create(
        cls,
        store: DocumentStore,
        transport: PushTransport,
        settings: Settings,
    ) -> "NotificationServices":
        return cls(
            store=store,
            directory=Directory(store),
            notifier=PushNotifier(transport),
            settings=settings,
        )


def build_services(settings: Settings) -> NotificationServices:
    """Wire the Firestore store and FCM transport from settings."""
    app = init_firebase_app(settings)
    return NotificationServices.create(
        store=FirestoreStore(app),
        transport=FcmTransport(app),
        settings=settings,
    )


def get_services(request: Request) -> NotificationServices:
    """FastAPI dependency returning the services built during lifespan."""
    return request.app.state.services
