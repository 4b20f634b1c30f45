from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text

from worktime.database import Base

START = "START"
STOP = "STOP"


class TimeEntry(Base):
    """Legacy point ledger, superseded by WorkSession."""

    __tablename__ = "time_entries"

    __table_args__ = (
        CheckConstraint("type IN ('START', 'STOP')", name="ck_time_entries_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    time = Column(DateTime(timezone=True), nullable=False, index=True)
    type = Column(String, nullable=False)  # START|STOP
    note = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
