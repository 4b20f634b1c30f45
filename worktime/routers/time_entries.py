from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from worktime.core.authorization import require_user_access
from worktime.database import get_db
from worktime.deps.auth import require_auth
from worktime.models.user import User
from worktime.schemas.audit import TimeEntryEditResponse
from worktime.schemas.time_entry import TimeEntryCreate, TimeEntryEdit, TimeEntryResponse
from worktime.services import time_entry_service

router = APIRouter(
    prefix="/time_entries",
    tags=["Time Entries (legacy)"],
)


@router.get("/me", response_model=list[TimeEntryResponse])
def list_my_entries(
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    rows = time_entry_service.list_time_entries(db, actor.id)
    return [TimeEntryResponse.model_validate(r) for r in rows]


@router.get("/user/{user_id}", response_model=list[TimeEntryResponse])
def list_user_entries(
    user_id: int,
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    target = require_user_access(db, actor, user_id)
    rows = time_entry_service.list_time_entries(db, target.id)
    return [TimeEntryResponse.model_validate(r) for r in rows]


@router.post("", response_model=TimeEntryResponse)
def create_entry(
    payload: TimeEntryCreate,
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    try:
        entry = time_entry_service.create_time_entry(
            db,
            user_id=actor.id,
            time=payload.time,
            entry_type=payload.type,
            note=payload.note,
        )
        db.commit()
        return TimeEntryResponse.model_validate(entry)
    except Exception:
        db.rollback()
        raise


@router.put("/{time_entry_id}", response_model=TimeEntryResponse)
def edit_entry(
    time_entry_id: int,
    payload: TimeEntryEdit,
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    fields = payload.model_dump(exclude_unset=True, exclude={"reason", "type"})
    if "type" in payload.model_fields_set:
        fields["entry_type"] = payload.type

    try:
        entry = time_entry_service.edit_time_entry(
            db,
            actor=actor,
            time_entry_id=time_entry_id,
            reason=payload.reason,
            **fields,
        )
        db.commit()
        return TimeEntryResponse.model_validate(entry)
    except Exception:
        db.rollback()
        raise


@router.get("/{time_entry_id}/history", response_model=list[TimeEntryEditResponse])
def get_entry_history(
    time_entry_id: int,
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    rows = time_entry_service.get_time_entry_history(db, actor=actor, time_entry_id=time_entry_id)
    return [TimeEntryEditResponse.model_validate(r) for r in rows]
