"""Legacy START/STOP point ledger, kept for migration and its audit trail."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from worktime.core.authorization import require_access
from worktime.core.errors import AlreadyActive, InvalidState, NotFound, TypeImmutable, WorktimeError
from worktime.models.edits import TimeEntryEdit
from worktime.models.time_entry import START, STOP, TimeEntry
from worktime.models.user import User
from worktime.services import audit_service
from worktime.services.durations import as_utc

logger = logging.getLogger(__name__)

UNSET: Any = object()


def _latest_entry(db: Session, user_id: int) -> Optional[TimeEntry]:
    return (
        db.query(TimeEntry)
        .filter(TimeEntry.user_id == int(user_id))
        .order_by(TimeEntry.time.desc(), TimeEntry.id.desc())
        .first()
    )


def _load_for_actor(db: Session, actor: User, time_entry_id: int) -> TimeEntry:
    entry = (
        db.query(TimeEntry)
        .filter(TimeEntry.id == int(time_entry_id))
        .with_for_update()
        .first()
    )
    if entry is None:
        raise NotFound("Entry not found")

    require_access(db, actor, entry.user_id)
    return entry


def list_time_entries(db: Session, user_id: int) -> list[TimeEntry]:
    return (
        db.query(TimeEntry)
        .filter(TimeEntry.user_id == int(user_id))
        .order_by(TimeEntry.time.desc(), TimeEntry.id.desc())
        .all()
    )


def create_time_entry(
    db: Session,
    *,
    user_id: int,
    time: datetime,
    entry_type: str,
    note: Optional[str] = None,
) -> TimeEntry:
    entry_type = str(entry_type).upper()
    if entry_type not in (START, STOP):
        raise WorktimeError("Type must be START or STOP")

    latest = _latest_entry(db, user_id)

    if entry_type == START and latest is not None and latest.type == START:
        raise AlreadyActive("Cannot start - already started")

    if entry_type == STOP and (latest is None or latest.type == STOP):
        raise InvalidState("Cannot stop - not started")

    entry = TimeEntry(
        user_id=int(user_id),
        time=as_utc(time),
        type=entry_type,
        note=note or None,
    )
    db.add(entry)
    db.flush()
    return entry


def edit_time_entry(
    db: Session,
    *,
    actor: User,
    time_entry_id: int,
    reason: Optional[str],
    time: Any = UNSET,
    note: Any = UNSET,
    entry_type: Any = UNSET,
) -> TimeEntry:
    """
    Only time and note are editable. Flipping START/STOP would invert the
    ledger's pairing, so a differing type is rejected with TypeImmutable.
    """
    reason = audit_service.require_reason(reason)

    entry = _load_for_actor(db, actor, time_entry_id)

    if entry_type is not UNSET and entry_type is not None and str(entry_type).upper() != entry.type:
        raise TypeImmutable()

    before = {"time": entry.time, "note": entry.note}
    after = {
        "time": entry.time if time is UNSET or time is None else as_utc(time),
        "note": entry.note if note is UNSET else note,
    }

    changes = audit_service.diff_fields(before, after)
    if not changes:
        return entry

    audit_service.record_time_entry_edit(
        db,
        time_entry_id=entry.id,
        editor_id=actor.id,
        changes=changes,
        reason=reason,
    )

    entry.time = after["time"]
    entry.note = after["note"]
    db.flush()
    return entry


def get_time_entry_history(db: Session, *, actor: User, time_entry_id: int) -> list[TimeEntryEdit]:
    entry = db.query(TimeEntry).filter(TimeEntry.id == int(time_entry_id)).first()
    if entry is None:
        raise NotFound("Entry not found")

    require_access(db, actor, entry.user_id)
    return audit_service.time_entry_history(db, entry.id)
