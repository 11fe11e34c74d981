"""Event history contracts."""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class HistoryRecord(BaseModel):
    event_id: int
    revision_no: int
    action: str
    details: str
    created_at: datetime


class RevisionOut(BaseModel):
    date: datetime
    action: str
    details: str


class EventHistoryOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_id: int = Field(serialization_alias="eventId")
    revisions: List[RevisionOut]
