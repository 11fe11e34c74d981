"""SQLAlchemy model package."""

from calendar_admin.models.event import Event
from calendar_admin.models.event_history import EventHistory

__all__ = [
    "Event",
    "EventHistory",
]
