from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text, text
from sqlalchemy.orm import relationship
from sqlalchemy.schema import Index

from worktime.database import Base

BREAK_TYPES = ("PAID", "UNPAID")


class Break(Base):
    __tablename__ = "breaks"

    __table_args__ = (
        # at most one open break per session
        Index(
            "uq_breaks_open",
            "work_session_id",
            unique=True,
            postgresql_where=text("end_time IS NULL"),
            sqlite_where=text("end_time IS NULL"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    work_session_id = Column(
        Integer,
        ForeignKey("work_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=True)
    duration = Column(Float, nullable=True)  # hours

    type = Column(String, nullable=False, default="UNPAID")
    note = Column(Text, nullable=True)

    work_session = relationship("WorkSession", back_populates="breaks")
