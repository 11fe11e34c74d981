"""Event service layer: input validation, history recording and storage transactions."""

import csv
import io
import logging
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Union

from fastapi import HTTPException

from calendar_admin.schemas.event import (
    DEFAULT_EVENT_TYPE,
    DEFAULT_GRADE,
    EVENT_TYPES,
    GRADE_TAGS,
    EventData,
    EventFilter,
    EventRecord,
)
from calendar_admin.storage.base import Storage

logger = logging.getLogger(__name__)

ACTION_CREATE = "create"
ACTION_UPDATE = "update"
ACTION_DELETE = "delete"

CSV_HEADER = [
    "id", "start", "end", "title_zh", "title_en",
    "description_zh", "description_en", "type", "grade", "link",
]

GradeInput = Union[str, Iterable[str], None]


def _text(value: Optional[str]) -> str:
    return (value or "").strip()


def _parse_date(value: Optional[str], label: str) -> Optional[date]:
    value = _text(value)
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"{label}格式錯誤，請使用 YYYY-MM-DD。")


def normalize_grades(value: GradeInput) -> List[str]:
    if value is None:
        raw = []
    elif isinstance(value, str):
        raw = [value]
    else:
        raw = list(value)
    tags: List[str] = []
    for item in raw:
        for tag in str(item).split(","):
            tag = tag.strip()
            if not tag or tag in tags:
                continue
            if tag not in GRADE_TAGS:
                raise HTTPException(status_code=400, detail=f"未知的年級標籤: {tag}")
            tags.append(tag)
    return tags or [DEFAULT_GRADE]


def build_event_data(
    *,
    start: Optional[str],
    end: Optional[str] = None,
    title_zh: Optional[str],
    title_en: Optional[str] = None,
    description_zh: Optional[str] = None,
    description_en: Optional[str] = None,
    type: Optional[str] = None,
    grade: GradeInput = None,
    link: Optional[str] = None,
) -> EventData:
    start_date = _parse_date(start, "開始日期")
    title = _text(title_zh)
    if start_date is None or not title:
        raise HTTPException(status_code=400, detail="請提供必要的開始日期與中文標題。")

    end_date = _parse_date(end, "結束日期") or start_date
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="結束日期不能早於開始日期。")

    event_type = _text(type) or DEFAULT_EVENT_TYPE
    if event_type not in EVENT_TYPES:
        raise HTTPException(status_code=400, detail=f"未知的事件類型: {event_type}")

    url = _text(link)
    if url and not url.startswith(("http://", "https://")):
        raise HTTPException(status_code=400, detail="超連結必須以 http:// 或 https:// 開頭。")

    return EventData(
        start=start_date,
        end=end_date,
        title_zh=title,
        title_en=_text(title_en),
        description_zh=description_zh or "",
        description_en=description_en or "",
        type=event_type,
        grade=normalize_grades(grade),
        link=url,
    )


def build_filter(
    *,
    search: Optional[str] = None,
    type: Optional[str] = None,
    grade: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> EventFilter:
    return EventFilter(
        search=_text(search) or None,
        type=_text(type) or None,
        grade=_text(grade) or None,
        start=_parse_date(start, "開始日期"),
        end=_parse_date(end, "結束日期"),
    )


def parse_event_id(value: Any) -> int:
    text = _text(str(value)) if value is not None else ""
    if not text:
        raise HTTPException(status_code=400, detail="請提供事件 ID。")
    try:
        return int(text)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"無效的事件 ID: {text}")


@contextmanager
def _unit_of_work(storage: Storage):
    storage.begin()
    try:
        yield
        storage.commit()
    except Exception:
        storage.rollback()
        raise


def list_events(storage: Storage, filters: Optional[EventFilter] = None, order_by_start: bool = False) -> List[EventRecord]:
    return storage.events.list(filters, order_by_start=order_by_start)


def get_event(storage: Storage, event_id: int) -> EventRecord:
    record = storage.events.get(event_id)
    if not record:
        raise HTTPException(status_code=404, detail="找不到指定的事件。")
    return record


def create_event(storage: Storage, data: EventData) -> EventRecord:
    with _unit_of_work(storage):
        record = storage.events.create(data)
        storage.history.append(record.id, ACTION_CREATE, f"新增: {record.title_zh}")
    logger.info("[events] created id=%s start=%s", record.id, record.start)
    return record


def update_event(storage: Storage, event_id: int, data: EventData) -> EventRecord:
    with _unit_of_work(storage):
        record = storage.events.update(event_id, data)
        if not record:
            raise HTTPException(status_code=404, detail="找不到指定的事件。")
        storage.history.append(record.id, ACTION_UPDATE, f"修改: {record.title_zh}")
    logger.info("[events] updated id=%s", event_id)
    return record


def delete_event(storage: Storage, event_id: int) -> EventRecord:
    with _unit_of_work(storage):
        record = get_event(storage, event_id)
        storage.events.delete(event_id)
        storage.history.append(event_id, ACTION_DELETE, f"刪除: {record.title_zh}")
    logger.info("[events] deleted id=%s", event_id)
    return record


def clear_events(storage: Storage) -> None:
    with _unit_of_work(storage):
        storage.events.clear()
    logger.warning("[events] cleared all events and history")


def to_response(record: EventRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "start": record.start,
        "end": record.end,
        "title": {"zh": record.title_zh, "en": record.title_en},
        "description": {"zh": record.description_zh, "en": record.description_en},
        "type": record.type,
        "grade": list(record.grade),
        "link": record.link,
    }


def export_csv(storage: Storage, filters: Optional[EventFilter] = None) -> str:
    output = io.StringIO()
    # UTF-8 BOM for spreadsheet tools
    output.write("\ufeff")
    writer = csv.writer(output)
    writer.writerow(CSV_HEADER)
    for record in list_events(storage, filters, order_by_start=True):
        writer.writerow([
            record.id,
            record.start.isoformat(),
            record.end.isoformat(),
            record.title_zh,
            record.title_en,
            record.description_zh,
            record.description_en,
            record.type,
            "|".join(record.grade),
            record.link,
        ])
    return output.getvalue()
