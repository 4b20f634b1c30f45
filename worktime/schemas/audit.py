from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class FieldChangeResponse(BaseModel):
    old: Any = None
    new: Any = None


class WorkSessionEditResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    work_session_id: int
    edited_by: int
    changes: dict[str, FieldChangeResponse]
    reason: str
    edited_at: datetime


class TimeEntryEditResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    time_entry_id: int
    edited_by: int
    changes: dict[str, FieldChangeResponse]
    reason: str
    edited_at: datetime
