from sqlalchemy import create_engine, inspect, text

from calendar_admin.database import Base
import calendar_admin.models  # noqa: F401
from calendar_admin.utils.schema_sync import sync_missing_schema_objects


def test_older_events_table_gains_missing_columns(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'old.db'}")
    with engine.begin() as conn:
        conn.execute(text(
            "CREATE TABLE events ("
            " id INTEGER PRIMARY KEY,"
            " start DATE NOT NULL,"
            " end_date DATE NOT NULL,"
            " title_zh VARCHAR(255) NOT NULL,"
            " title_en VARCHAR(255) NOT NULL,"
            " description_zh TEXT NOT NULL,"
            " description_en TEXT NOT NULL,"
            " type VARCHAR(50) NOT NULL)"
        ))
        conn.execute(text(
            "INSERT INTO events (start, end_date, title_zh, title_en, description_zh, description_en, type)"
            " VALUES ('2025-09-01', '2025-09-01', '開學典禮', '', '', '', 'school-activity')"
        ))

    Base.metadata.create_all(bind=engine)
    added = sync_missing_schema_objects(engine, Base.metadata)

    assert "events.grade" in added
    assert "events.link" in added
    assert "events.idx_events_start" in added
    columns = {col["name"] for col in inspect(engine).get_columns("events")}
    assert {"grade", "link", "created_at", "updated_at"} <= columns
    with engine.connect() as conn:
        row = conn.execute(text("SELECT grade, link FROM events")).one()
    assert tuple(row) == ("all-grades", "")

    assert sync_missing_schema_objects(engine, Base.metadata) == []
    engine.dispose()
