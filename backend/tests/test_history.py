"""Revision history policy and the event + history transaction."""

import pytest
from sqlalchemy.exc import OperationalError

from calendar_admin.models.event import Event
from calendar_admin.models.event_history import EventHistory
from calendar_admin.services import event_service
from calendar_admin.storage.sql_store import SqlHistoryStore
from tests.conftest import add_event


def test_add_update_delete_each_append_history(client):
    add_event(client, title_zh="開學典禮")
    client.post(
        "/admin/update/save",
        data={"id": "1", "start": "2025-09-01", "title_zh": "開學典禮（延期）"},
    )
    client.post("/admin/delete", data={"id": "1"})

    history = client.get("/api/history").json()
    assert len(history) == 1
    assert history[0]["eventId"] == 1
    revisions = history[0]["revisions"]
    assert [r["action"] for r in revisions] == ["create", "update", "delete"]
    assert revisions[0]["details"] == "新增: 開學典禮"
    assert revisions[1]["details"] == "修改: 開學典禮（延期）"
    assert all(r["date"] for r in revisions)


def test_history_is_grouped_per_event(client):
    add_event(client, title_zh="A")
    add_event(client, title_zh="B")

    history = client.get("/api/history").json()
    assert [h["eventId"] for h in history] == [1, 2]
    assert all(len(h["revisions"]) == 1 for h in history)


def test_history_survives_event_deletion(client, db):
    add_event(client, title_zh="A")
    client.post("/admin/delete", data={"id": "1"})

    assert db.query(Event).count() == 0
    rows = db.query(EventHistory).order_by(EventHistory.revision_no).all()
    assert [(r.event_id, r.revision_no) for r in rows] == [(1, 1), (1, 2)]


def test_failed_validation_writes_no_history(client):
    add_event(client, start="2025-09-02", end="2025-09-01")
    client.post("/admin/delete", data={"id": "5"})
    assert client.get("/api/history").json() == []


def test_history_failure_rolls_back_event_insert(storage, db, monkeypatch):
    def fail(self, event_id, action, details):
        raise OperationalError("INSERT INTO event_history", {}, Exception("disk full"))

    monkeypatch.setattr(SqlHistoryStore, "append", fail)
    data = event_service.build_event_data(start="2025-09-01", title_zh="開學典禮")

    with pytest.raises(OperationalError):
        event_service.create_event(storage, data)

    assert db.query(Event).count() == 0
    assert db.query(EventHistory).count() == 0


def test_storage_failure_returns_generic_500(client, monkeypatch, caplog):
    def fail(self, event_id, action, details):
        raise OperationalError("INSERT INTO event_history", {}, Exception("disk full"))

    monkeypatch.setattr(SqlHistoryStore, "append", fail)

    with caplog.at_level("ERROR"):
        resp = add_event(client)
    assert resp.status_code == 500
    assert "伺服器錯誤" in resp.text
    assert "disk full" not in resp.text
    assert "disk full" in caplog.text

    assert client.get("/api/events").json() == []
