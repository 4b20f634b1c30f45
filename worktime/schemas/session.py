from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class StartSessionRequest(BaseModel):
    note: Optional[str] = None
    project: Optional[str] = None


class StopSessionRequest(BaseModel):
    end_time: Optional[datetime] = Field(
        default=None,
        description="If omitted, server uses current UTC time.",
    )


class StartBreakRequest(BaseModel):
    type: Literal["PAID", "UNPAID"] = "UNPAID"
    note: Optional[str] = None


class EditSessionRequest(BaseModel):
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    note: Optional[str] = None
    project: Optional[str] = None
    reason: str = ""


class BreakResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    work_session_id: int
    start_time: datetime
    end_time: Optional[datetime]
    duration: Optional[float]
    type: str
    note: Optional[str]


class WorkSessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    start_time: datetime
    end_time: Optional[datetime]
    status: str
    total_duration: Optional[float]
    break_duration: Optional[float]
    net_duration: Optional[float]
    note: Optional[str]
    project: Optional[str]
    breaks: list[BreakResponse] = []
