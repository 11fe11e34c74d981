"""Storage interface shared by the SQL and JSON adapters.

Adapters speak only in ``EventData`` / ``EventRecord`` / ``HistoryRecord``;
any encoding of grade tags or dates stays inside the adapter.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from calendar_admin.schemas.event import EventData, EventFilter, EventRecord
from calendar_admin.schemas.history import HistoryRecord


def keyword_matches(record: EventRecord, keyword: str) -> bool:
    """Case-insensitive substring match over both titles and descriptions."""
    keyword = keyword.lower()
    haystack = (record.title_zh, record.title_en, record.description_zh, record.description_en)
    return any(keyword in value.lower() for value in haystack)


class StorageError(RuntimeError):
    """Raised by adapters when the backing medium fails."""


class EventStore(ABC):
    @abstractmethod
    def list(self, filters: Optional[EventFilter] = None, order_by_start: bool = False) -> List[EventRecord]: ...
    @abstractmethod
    def get(self, event_id: int) -> Optional[EventRecord]: ...
    @abstractmethod
    def create(self, data: EventData) -> EventRecord: ...
    @abstractmethod
    def update(self, event_id: int, data: EventData) -> Optional[EventRecord]: ...
    @abstractmethod
    def delete(self, event_id: int) -> bool: ...
    @abstractmethod
    def clear(self) -> None: ...


class HistoryStore(ABC):
    @abstractmethod
    def append(self, event_id: int, action: str, details: str) -> HistoryRecord: ...
    @abstractmethod
    def list(self) -> List[HistoryRecord]: ...


class Storage(ABC):
    """A unit of work over one event store and one history store.

    Writes made through ``events`` and ``history`` after ``begin`` become
    durable together on ``commit`` and are discarded together on ``rollback``.
    """

    events: EventStore
    history: HistoryStore

    def begin(self) -> None:
        """Start a write unit of work. Adapters that need no setup keep this no-op."""

    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
