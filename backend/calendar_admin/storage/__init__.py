"""Storage adapters and the request-scoped ``get_storage`` dependency."""

from calendar_admin.config import settings
from calendar_admin.database import get_session_factory
from calendar_admin.storage.base import EventStore, HistoryStore, Storage, StorageError
from calendar_admin.storage.json_store import JsonStorage
from calendar_admin.storage.sql_store import SqlStorage


def get_storage():
    if settings.STORAGE_BACKEND == "json":
        with JsonStorage(settings.EVENTS_JSON_PATH) as storage:
            yield storage
        return

    db = get_session_factory()()
    try:
        yield SqlStorage(db)
    finally:
        db.close()


__all__ = [
    "EventStore", "HistoryStore", "Storage", "StorageError",
    "JsonStorage", "SqlStorage",
    "get_storage",
]
