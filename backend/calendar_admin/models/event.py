"""SQLAlchemy model for calendar events.

``grade`` is stored comma-joined; only the SQL storage adapter
encodes and decodes it.
"""

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Index
from sqlalchemy.sql import func
from calendar_admin.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    start = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    title_zh = Column(String(255), nullable=False)
    title_en = Column(String(255), nullable=False, default="")
    description_zh = Column(Text, nullable=False, default="")
    description_en = Column(Text, nullable=False, default="")
    type = Column(String(50), nullable=False)
    # grade-1/grade-2/grade-3/all-grades, comma-joined
    grade = Column(String(255), nullable=False, default="all-grades")
    link = Column(String(255), nullable=False, default="")
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    __table_args__ = (
        Index("idx_events_start", "start", "end_date"),
    )
