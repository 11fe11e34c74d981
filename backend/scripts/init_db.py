"""Initialize the database - creates the events and event_history tables."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from calendar_admin.database import Base, get_engine
import calendar_admin.models  # noqa: F401 - registers all models


def init_db():
    engine = get_engine()
    print(f"Creating tables on {engine.url.render_as_string(hide_password=True)} ...")
    Base.metadata.create_all(bind=engine)
    print("Database initialized successfully.")


if __name__ == "__main__":
    init_db()
