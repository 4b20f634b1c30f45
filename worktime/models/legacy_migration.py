from sqlalchemy import Column, DateTime, ForeignKey, Integer

from worktime.database import Base


class LegacyMigration(Base):
    """Marks a user's point ledger as already reconciled into sessions."""

    __tablename__ = "legacy_migrations"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    sessions_created = Column(Integer, nullable=False, default=0)
    orphans_flagged = Column(Integer, nullable=False, default=0)
    migrated_at = Column(DateTime(timezone=True), nullable=False)
