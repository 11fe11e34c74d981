"""Pydantic contracts for calendar events.

``EventData`` is the canonical, already validated shape that crosses the
storage interface. ``EventOut`` is the normalized public shape.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

EVENT_TYPES = {
    "important-exam": "重要考試",
    "school-activity": "學校活動",
    "announcement": "公告",
    "holiday": "假期",
    "meeting": "會議",
    "lecture": "講座",
    "inspection": "視察",
    "other": "其他",
}
DEFAULT_EVENT_TYPE = "other"

GRADE_TAGS = {
    "grade-1": "高一",
    "grade-2": "高二",
    "grade-3": "高三",
    "all-grades": "全年級",
}
DEFAULT_GRADE = "all-grades"


class EventData(BaseModel):
    start: date
    end: date
    title_zh: str
    title_en: str = ""
    description_zh: str = ""
    description_en: str = ""
    type: str = DEFAULT_EVENT_TYPE
    grade: List[str] = Field(default_factory=lambda: [DEFAULT_GRADE])
    link: str = ""


class EventRecord(EventData):
    id: int


class EventFilter(BaseModel):
    search: Optional[str] = None
    type: Optional[str] = None
    grade: Optional[str] = None
    start: Optional[date] = None
    end: Optional[date] = None


class LocalizedText(BaseModel):
    zh: str = ""
    en: str = ""


class EventOut(BaseModel):
    id: int
    start: date
    end: date
    title: LocalizedText
    description: LocalizedText
    type: str
    grade: List[str]
    link: str
