"""SQLAlchemy model for event revision history.

Append-only audit rows. ``event_id`` carries no foreign key so history
survives deletion of the event it describes.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, Index

from calendar_admin.database import Base


class EventHistory(Base):
    __tablename__ = "event_history"

    history_id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, nullable=False)
    revision_no = Column(Integer, nullable=False)
    action = Column(String(20), nullable=False)  # create/update/delete
    details = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index("idx_event_history_event", "event_id", "revision_no"),
    )
