from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    email: str
    first_name: Optional[str]
    last_name: Optional[str]
    role: str
    weekly_hours_target: float
    created_at: datetime


class WeekBucket(BaseModel):
    week_start: date
    hours: float
    sessions: int


class WeeklyStatsResponse(BaseModel):
    weeks: list[WeekBucket]
    target: float


class MonthlyStatsResponse(BaseModel):
    year: int
    month: int
    total_hours: float
    total_sessions: int
    avg_session_duration: float
    days_worked: int


class UserUpdate(BaseModel):
    role: Optional[Literal["ADMIN", "USER"]] = None
    weekly_hours_target: Optional[float] = Field(default=None, ge=0)
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class OnlineStatusResponse(BaseModel):
    id: int
    email: str
    first_name: Optional[str]
    last_name: Optional[str]
    online: bool
    status: Optional[str]
    time: Optional[datetime]
