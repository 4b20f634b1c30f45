"""
Append-only edit history for finalized records (work sessions and legacy
time entries).

Writers only add and flush; the caller owns the transaction, so an audit
row and the mutation it describes commit or roll back together.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from worktime.core.errors import ReasonRequired
from worktime.models.edits import TimeEntryEdit, WorkSessionEdit
from worktime.models.user import User
from worktime.models.work_session import WorkSession
from worktime.services.durations import as_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldChange:
    old: Any
    new: Any

    def to_json(self) -> dict:
        return {"old": _jsonable(self.old), "new": _jsonable(self.new)}


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    return value


def _normalized(value: Any) -> Any:
    if isinstance(value, datetime):
        return as_utc(value)
    return value


def require_reason(reason: Optional[str]) -> str:
    if reason is None or not str(reason).strip():
        raise ReasonRequired()
    return str(reason).strip()


def diff_fields(before: Mapping[str, Any], after: Mapping[str, Any]) -> dict[str, FieldChange]:
    """Fields whose value differs; datetimes are compared as UTC instants."""
    changes: dict[str, FieldChange] = {}
    for field, new_value in after.items():
        old_value = before.get(field)
        if _normalized(old_value) != _normalized(new_value):
            changes[field] = FieldChange(old=old_value, new=new_value)
    return changes


def serialize_changes(changes: Mapping[str, FieldChange]) -> dict:
    return {field: change.to_json() for field, change in changes.items()}


def record_session_edit(
    db: Session,
    *,
    session_id: int,
    editor_id: int,
    changes: Mapping[str, FieldChange],
    reason: str,
) -> WorkSessionEdit:
    row = WorkSessionEdit(
        work_session_id=int(session_id),
        edited_by=int(editor_id),
        changes=serialize_changes(changes),
        reason=require_reason(reason),
    )
    db.add(row)
    db.flush()

    logger.info(
        "Work session edit recorded",
        extra={
            "work_session_id": int(session_id),
            "edited_by": int(editor_id),
            "fields": sorted(changes),
        },
    )
    return row


def record_time_entry_edit(
    db: Session,
    *,
    time_entry_id: int,
    editor_id: int,
    changes: Mapping[str, FieldChange],
    reason: str,
) -> TimeEntryEdit:
    row = TimeEntryEdit(
        time_entry_id=int(time_entry_id),
        edited_by=int(editor_id),
        changes=serialize_changes(changes),
        reason=require_reason(reason),
    )
    db.add(row)
    db.flush()

    logger.info(
        "Time entry edit recorded",
        extra={
            "time_entry_id": int(time_entry_id),
            "edited_by": int(editor_id),
            "fields": sorted(changes),
        },
    )
    return row


def session_history(db: Session, session_id: int) -> list[WorkSessionEdit]:
    return (
        db.query(WorkSessionEdit)
        .filter(WorkSessionEdit.work_session_id == int(session_id))
        .order_by(WorkSessionEdit.edited_at.desc(), WorkSessionEdit.id.desc())
        .all()
    )


def time_entry_history(db: Session, time_entry_id: int) -> list[TimeEntryEdit]:
    return (
        db.query(TimeEntryEdit)
        .filter(TimeEntryEdit.time_entry_id == int(time_entry_id))
        .order_by(TimeEntryEdit.edited_at.desc(), TimeEntryEdit.id.desc())
        .all()
    )


def company_audit_log(
    db: Session,
    *,
    company_id: int,
    user_id: Optional[int] = None,
    edited_from: Optional[datetime] = None,
    edited_to: Optional[datetime] = None,
    limit: int = 100,
) -> list[WorkSessionEdit]:
    """Session edits across a company, newest first. Scoped by the session owner's company."""
    q = (
        db.query(WorkSessionEdit)
        .join(WorkSession, WorkSession.id == WorkSessionEdit.work_session_id)
        .join(User, User.id == WorkSession.user_id)
        .filter(User.company_id == int(company_id))
    )

    if user_id is not None:
        q = q.filter(WorkSession.user_id == int(user_id))
    if edited_from is not None:
        q = q.filter(WorkSessionEdit.edited_at >= edited_from)
    if edited_to is not None:
        q = q.filter(WorkSessionEdit.edited_at <= edited_to)

    return (
        q.order_by(WorkSessionEdit.edited_at.desc(), WorkSessionEdit.id.desc())
        .limit(int(limit))
        .all()
    )
