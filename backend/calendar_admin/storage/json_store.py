"""Single-file JSON storage adapter.

Reads work on a snapshot loaded when the storage is opened; the file is
only ever replaced by an atomic rename, so a snapshot is always complete.
A write unit of work (``begin`` .. ``commit``/``rollback``) holds a
per-path lock, reloads the document and writes it back through a temporary
file. The lock is taken and released on the thread that does the work.
Writers in other processes can still overwrite each other.
"""

import json
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from calendar_admin.schemas.event import DEFAULT_GRADE, EventData, EventFilter, EventRecord
from calendar_admin.schemas.history import HistoryRecord
from calendar_admin.storage.base import EventStore, HistoryStore, Storage, StorageError, keyword_matches

_locks: Dict[str, threading.Lock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = str(path.resolve())
    with _locks_guard:
        return _locks.setdefault(key, threading.Lock())


def _empty_document() -> Dict[str, Any]:
    return {"next_id": 1, "events": [], "history": []}


def event_to_dict(record: EventRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "start": record.start.isoformat(),
        "end": record.end.isoformat(),
        "title": {"zh": record.title_zh, "en": record.title_en},
        "description": {"zh": record.description_zh, "en": record.description_en},
        "type": record.type,
        "grade": list(record.grade),
        "link": record.link,
    }


def event_from_dict(item: Dict[str, Any]) -> EventRecord:
    title = item.get("title") or {}
    description = item.get("description") or {}
    grade = item.get("grade") or [DEFAULT_GRADE]
    if isinstance(grade, str):
        grade = [tag for tag in grade.split(",") if tag]
    return EventRecord(
        id=int(item["id"]),
        start=item["start"],
        end=item.get("end") or item["start"],
        title_zh=title.get("zh", ""),
        title_en=title.get("en") or "",
        description_zh=description.get("zh") or "",
        description_en=description.get("en") or "",
        type=item.get("type") or "other",
        grade=grade,
        link=item.get("link") or "",
    )


def _matches(record: EventRecord, filters: EventFilter) -> bool:
    if filters.search and not keyword_matches(record, filters.search):
        return False
    if filters.type and record.type != filters.type:
        return False
    if filters.grade and not any(filters.grade in tag for tag in record.grade):
        return False
    if filters.start and record.end < filters.start:
        return False
    if filters.end and record.start > filters.end:
        return False
    return True


def _decode_document(raw: Any) -> Dict[str, Any]:
    # Early files were a bare list of events addressed by position.
    if isinstance(raw, list):
        raw = {"events": [dict(item, id=item.get("id", idx + 1)) for idx, item in enumerate(raw)]}
    if not isinstance(raw, dict):
        raise TypeError(f"expected an object or a list, got {type(raw).__name__}")
    document = _empty_document()
    document.update(raw)
    if not isinstance(document["events"], list) or not isinstance(document["history"], list):
        raise TypeError("events and history must be lists")
    for item in document["events"]:
        event_from_dict(item)
    for item in document["history"]:
        HistoryRecord.model_validate(item)
    if "next_id" in raw:
        document["next_id"] = int(raw["next_id"])
    else:
        document["next_id"] = max((int(item["id"]) for item in document["events"]), default=0) + 1
    return document


class JsonEventStore(EventStore):
    def __init__(self, document: Dict[str, Any]):
        self.document = document

    def _records(self) -> List[EventRecord]:
        return [event_from_dict(item) for item in self.document["events"]]

    def _index(self, event_id: int) -> Optional[int]:
        for idx, item in enumerate(self.document["events"]):
            if int(item["id"]) == event_id:
                return idx
        return None

    def list(self, filters: Optional[EventFilter] = None, order_by_start: bool = False) -> List[EventRecord]:
        records = self._records()
        if filters is not None:
            records = [r for r in records if _matches(r, filters)]
        if order_by_start:
            records.sort(key=lambda r: (r.start, r.id))
        return records

    def get(self, event_id: int) -> Optional[EventRecord]:
        idx = self._index(event_id)
        if idx is None:
            return None
        return event_from_dict(self.document["events"][idx])

    def create(self, data: EventData) -> EventRecord:
        record = EventRecord(id=self.document["next_id"], **data.model_dump())
        self.document["next_id"] += 1
        self.document["events"].append(event_to_dict(record))
        return record

    def update(self, event_id: int, data: EventData) -> Optional[EventRecord]:
        idx = self._index(event_id)
        if idx is None:
            return None
        record = EventRecord(id=event_id, **data.model_dump())
        self.document["events"][idx] = event_to_dict(record)
        return record

    def delete(self, event_id: int) -> bool:
        idx = self._index(event_id)
        if idx is None:
            return False
        del self.document["events"][idx]
        return True

    def clear(self) -> None:
        self.document["events"] = []
        self.document["history"] = []
        self.document["next_id"] = 1


class JsonHistoryStore(HistoryStore):
    def __init__(self, document: Dict[str, Any]):
        self.document = document

    def append(self, event_id: int, action: str, details: str) -> HistoryRecord:
        revision_no = 1 + sum(1 for item in self.document["history"] if item["event_id"] == event_id)
        record = HistoryRecord(
            event_id=event_id,
            revision_no=revision_no,
            action=action,
            details=details,
            created_at=datetime.now(timezone.utc),
        )
        self.document["history"].append(record.model_dump(mode="json"))
        return record

    def list(self) -> List[HistoryRecord]:
        records = [HistoryRecord.model_validate(item) for item in self.document["history"]]
        records.sort(key=lambda r: (r.event_id, r.revision_no))
        return records


class JsonStorage(Storage):
    """Unit of work over a JSON document. Use as a context manager."""

    def __init__(self, path):
        self.path = Path(path)
        self._lock = _lock_for(self.path)
        self._locked = False
        self.document = self._load()
        self.events = JsonEventStore(self.document)
        self.history = JsonHistoryStore(self.document)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return _empty_document()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"cannot read {self.path}: {exc}") from exc
        try:
            return _decode_document(raw)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise StorageError(f"malformed event data in {self.path}: {exc}") from exc

    def _reset(self, document: Dict[str, Any]):
        self.document.clear()
        self.document.update(document)

    def begin(self) -> None:
        self._lock.acquire()
        self._locked = True
        try:
            self._reset(self._load())
        except BaseException:
            self._release()
            raise

    def _release(self) -> None:
        if self._locked:
            self._locked = False
            self._lock.release()

    def commit(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".events-", suffix=".json", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(self.document, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as exc:
            raise StorageError(f"cannot write {self.path}: {exc}") from exc
        finally:
            self._release()

    def rollback(self) -> None:
        try:
            self._reset(self._load())
        finally:
            self._release()

    def close(self) -> None:
        self._release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
