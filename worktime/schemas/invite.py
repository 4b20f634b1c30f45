from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class InviteCreate(BaseModel):
    email: str
    role: Literal["ADMIN", "USER"] = "USER"


class InviteAccept(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class InviteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    token: str
    company_id: int
    role: str
    expires_at: datetime
    used_at: Optional[datetime]
    link: Optional[str] = None


class InviteValidation(BaseModel):
    email: str
    company_name: str
