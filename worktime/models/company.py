from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from worktime.database import Base


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=True)
    country = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
