"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from fastapi import Request

from daytracker.config import Settings
from daytracker.service import DayRecordService
from daytracker.storage import (
    DatabaseDayStore,
    DayStore,
    FileDayStore,
    InMemoryDayStore,
    turso_sqlalchemy_url,
)

logger = logging.getLogger(__name__)


def build_day_store(settings: Settings) -> DayStore:
    """
    Pick the persistence backend once, at startup.

    Turso wins when both its URL and token are configured, then a generic
    SQLAlchemy URL, then the in-memory toggle, and finally local JSON files.
    """
    if settings.use_turso:
        return DatabaseDayStore(
            turso_sqlalchemy_url(
                settings.turso_database_url, settings.turso_auth_token
            )
        )
    if settings.database_url:
        return DatabaseDayStore(settings.database_url)
    if settings.use_in_memory_backends:
        return InMemoryDayStore()
    return FileDayStore(settings.data_dir)


def describe_store(store: DayStore) -> str:
    if isinstance(store, FileDayStore):
        return f"local JSON files in {store.root}"
    if isinstance(store, DatabaseDayStore):
        return f"{store.engine.dialect.name} database ({store.engine.url.host or 'local'})"
    return "in-memory storage"


def get_day_service(request: Request) -> DayRecordService:
    """Return the service the app was constructed with."""
    return request.app.state.day_service
