"""
config.py

Centralized configuration management using pydantic-settings.
All modules must import settings from this file.
Direct os.getenv() calls are prohibited elsewhere.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings loaded from .env file."""

    # Firebase (Firestore + Cloud Messaging)
    firebase_project_id: str = ""
    firebase_credentials_path: str = ""  # empty -> application default credentials

    # Celery broker for the reminder tick
    redis_url: str = "redis://127.0.0.1:6379/0"

    # Rendering
    display_timezone: str = "UTC"

    # Reminder sweep
    reminder_lookahead_hours: int = 24
    default_reminder_hours_before: int = 24
    reminder_sweep_minute: int = 0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


settings = Settings()
