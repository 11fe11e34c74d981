"""Relational storage adapter backed by a SQLAlchemy session."""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, or_, text
from sqlalchemy.orm import Session

from calendar_admin.models.event import Event
from calendar_admin.models.event_history import EventHistory
from calendar_admin.schemas.event import DEFAULT_GRADE, EventData, EventFilter, EventRecord
from calendar_admin.schemas.history import HistoryRecord
from calendar_admin.storage.base import EventStore, HistoryStore, Storage, keyword_matches

GRADE_SEPARATOR = ","


def encode_grade(tags: List[str]) -> str:
    return GRADE_SEPARATOR.join(tags)


def decode_grade(value: Optional[str]) -> List[str]:
    tags = [tag.strip() for tag in (value or "").split(GRADE_SEPARATOR) if tag.strip()]
    return tags or [DEFAULT_GRADE]


def _to_record(row: Event) -> EventRecord:
    return EventRecord(
        id=row.id,
        start=row.start,
        end=row.end_date or row.start,
        title_zh=row.title_zh,
        title_en=row.title_en or "",
        description_zh=row.description_zh or "",
        description_en=row.description_en or "",
        type=row.type,
        grade=decode_grade(row.grade),
        link=row.link or "",
    )


def _apply(row: Event, data: EventData):
    row.start = data.start
    row.end_date = data.end
    row.title_zh = data.title_zh
    row.title_en = data.title_en
    row.description_zh = data.description_zh
    row.description_en = data.description_en
    row.type = data.type
    row.grade = encode_grade(data.grade)
    row.link = data.link


class SqlEventStore(EventStore):
    def __init__(self, db: Session):
        self.db = db

    def list(self, filters: Optional[EventFilter] = None, order_by_start: bool = False) -> List[EventRecord]:
        q = self.db.query(Event)
        # SQLite's lower() folds ASCII only; match the keyword in Python there.
        fold_in_python = self.db.get_bind().dialect.name == "sqlite"
        if filters is not None:
            if filters.search and not fold_in_python:
                keyword = filters.search.lower()
                q = q.filter(or_(
                    func.lower(Event.title_zh).contains(keyword, autoescape=True),
                    func.lower(Event.title_en).contains(keyword, autoescape=True),
                    func.lower(Event.description_zh).contains(keyword, autoescape=True),
                    func.lower(Event.description_en).contains(keyword, autoescape=True),
                ))
            if filters.type:
                q = q.filter(Event.type == filters.type)
            if filters.grade:
                q = q.filter(Event.grade.contains(filters.grade, autoescape=True))
            if filters.start:
                q = q.filter(Event.end_date >= filters.start)
            if filters.end:
                q = q.filter(Event.start <= filters.end)
        if order_by_start:
            q = q.order_by(Event.start.asc(), Event.id.asc())
        else:
            q = q.order_by(Event.id.asc())
        records = [_to_record(row) for row in q.all()]
        if filters is not None and filters.search and fold_in_python:
            records = [r for r in records if keyword_matches(r, filters.search)]
        return records

    def _row(self, event_id: int) -> Optional[Event]:
        return self.db.query(Event).filter(Event.id == event_id).first()

    def get(self, event_id: int) -> Optional[EventRecord]:
        row = self._row(event_id)
        return _to_record(row) if row else None

    def create(self, data: EventData) -> EventRecord:
        row = Event()
        _apply(row, data)
        self.db.add(row)
        self.db.flush()
        return _to_record(row)

    def update(self, event_id: int, data: EventData) -> Optional[EventRecord]:
        row = self._row(event_id)
        if not row:
            return None
        _apply(row, data)
        self.db.flush()
        return _to_record(row)

    def delete(self, event_id: int) -> bool:
        row = self._row(event_id)
        if not row:
            return False
        self.db.delete(row)
        self.db.flush()
        return True

    def clear(self) -> None:
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            self.db.execute(text("TRUNCATE TABLE events, event_history RESTART IDENTITY"))
            return
        self.db.query(EventHistory).delete(synchronize_session=False)
        self.db.query(Event).delete(synchronize_session=False)
        if dialect == "mysql":
            self.db.execute(text("ALTER TABLE events AUTO_INCREMENT = 1"))
            self.db.execute(text("ALTER TABLE event_history AUTO_INCREMENT = 1"))
        # SQLite rowid tables restart from max(rowid)+1, i.e. 1 once empty.


class SqlHistoryStore(HistoryStore):
    def __init__(self, db: Session):
        self.db = db

    def append(self, event_id: int, action: str, details: str) -> HistoryRecord:
        current_max = (
            self.db.query(func.max(EventHistory.revision_no))
            .filter(EventHistory.event_id == event_id)
            .scalar()
        )
        row = EventHistory(
            event_id=event_id,
            revision_no=(current_max or 0) + 1,
            action=action,
            details=details,
            created_at=datetime.now(timezone.utc).replace(tzinfo=None),
        )
        self.db.add(row)
        self.db.flush()
        return _to_history(row)

    def list(self) -> List[HistoryRecord]:
        rows = (
            self.db.query(EventHistory)
            .order_by(EventHistory.event_id.asc(), EventHistory.revision_no.asc())
            .all()
        )
        return [_to_history(row) for row in rows]


def _to_history(row: EventHistory) -> HistoryRecord:
    created_at = row.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return HistoryRecord(
        event_id=row.event_id,
        revision_no=row.revision_no,
        action=row.action,
        details=row.details or "",
        created_at=created_at,
    )


class SqlStorage(Storage):
    def __init__(self, db: Session):
        self.db = db
        self.events = SqlEventStore(db)
        self.history = SqlHistoryStore(db)

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
