"""Service layer package."""

from calendar_admin.services import (
    event_service,
    history_service,
)
