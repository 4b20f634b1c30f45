from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, Float, ForeignKey, Integer, String, Text, text
from sqlalchemy.orm import relationship
from sqlalchemy.schema import Index

from worktime.database import Base

ONGOING = "ONGOING"
PAUSED = "PAUSED"
COMPLETED = "COMPLETED"

ACTIVE_STATUSES = (ONGOING, PAUSED)

_ACTIVE_PREDICATE = "status IN ('ONGOING', 'PAUSED')"


class WorkSession(Base):
    __tablename__ = "work_sessions"

    __table_args__ = (
        # at most one ONGOING/PAUSED session per user
        Index(
            "uq_work_sessions_active",
            "user_id",
            unique=True,
            postgresql_where=text(_ACTIVE_PREDICATE),
            sqlite_where=text(_ACTIVE_PREDICATE),
        ),
        Index("ix_work_sessions_user_start", "user_id", "start_time"),
        CheckConstraint(
            "status IN ('ONGOING', 'PAUSED', 'COMPLETED')",
            name="ck_work_sessions_status",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=True)

    status = Column(String, nullable=False, default=ONGOING, index=True)

    # hours
    total_duration = Column(Float, nullable=True)
    break_duration = Column(Float, nullable=True)
    net_duration = Column(Float, nullable=True)

    note = Column(Text, nullable=True)
    project = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    breaks = relationship(
        "Break",
        back_populates="work_session",
        cascade="all, delete-orphan",
        order_by="Break.start_time",
    )
