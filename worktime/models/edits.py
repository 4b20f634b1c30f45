from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.dialects.postgresql import JSONB

from worktime.database import Base

ChangesType = JSON().with_variant(JSONB(), "postgresql")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WorkSessionEdit(Base):
    __tablename__ = "work_session_edits"

    id = Column(Integer, primary_key=True, index=True)
    work_session_id = Column(
        Integer,
        ForeignKey("work_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    edited_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # {field: {"old": ..., "new": ...}}
    changes = Column(ChangesType, nullable=False)
    reason = Column(Text, nullable=False)

    edited_at = Column(DateTime(timezone=True), nullable=False, default=_utc_now, index=True)


class TimeEntryEdit(Base):
    __tablename__ = "time_entry_edits"

    id = Column(Integer, primary_key=True, index=True)
    time_entry_id = Column(
        Integer,
        ForeignKey("time_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    edited_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    changes = Column(ChangesType, nullable=False)
    reason = Column(Text, nullable=False)

    edited_at = Column(DateTime(timezone=True), nullable=False, default=_utc_now, index=True)
