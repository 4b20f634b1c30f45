from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class TimeEntryCreate(BaseModel):
    time: datetime
    type: Literal["START", "STOP"]
    note: Optional[str] = None


class TimeEntryEdit(BaseModel):
    time: Optional[datetime] = None
    note: Optional[str] = None
    type: Optional[str] = None
    reason: str = ""


class TimeEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    time: datetime
    type: str
    note: Optional[str]
