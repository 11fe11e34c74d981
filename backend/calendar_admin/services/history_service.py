"""Read side of the event revision history."""

from itertools import groupby
from typing import Any, Dict, List

from calendar_admin.storage.base import Storage


def list_history(storage: Storage) -> List[Dict[str, Any]]:
    """Group revisions per event, oldest revision first."""
    records = storage.history.list()
    grouped = []
    for event_id, rows in groupby(records, key=lambda r: r.event_id):
        grouped.append({
            "event_id": event_id,
            "revisions": [
                {"date": row.created_at, "action": row.action, "details": row.details}
                for row in rows
            ],
        })
    return grouped
