"""Public read API for calendar events and their revision history."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from calendar_admin.schemas.event import EventOut
from calendar_admin.schemas.history import EventHistoryOut
from calendar_admin.services import event_service, history_service
from calendar_admin.storage import Storage, get_storage

router = APIRouter(prefix="/api", tags=["events"])


@router.get("/events", response_model=List[EventOut])
def list_events(
    search: Optional[str] = None,
    event_type: Optional[str] = Query(None, alias="type"),
    grade: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    storage: Storage = Depends(get_storage),
):
    filters = event_service.build_filter(search=search, type=event_type, grade=grade, start=start, end=end)
    return [event_service.to_response(r) for r in event_service.list_events(storage, filters)]


@router.get("/events/{event_id}", response_model=EventOut)
def get_event(event_id: int, storage: Storage = Depends(get_storage)):
    return event_service.to_response(event_service.get_event(storage, event_id))


@router.get("/history", response_model=List[EventHistoryOut])
def list_history(storage: Storage = Depends(get_storage)):
    return history_service.list_history(storage)
