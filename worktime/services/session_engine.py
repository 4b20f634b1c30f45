"""
Work-session lifecycle: NONE -> ONGOING -> PAUSED <-> ONGOING -> COMPLETED.

Every function takes the caller's Session and only flushes; the caller
commits or rolls back. Read-modify-write paths lock the session row first so
a concurrent break-end and stop cannot both work from a stale break list.
The one-active-session and one-open-break invariants are backed by partial
unique indexes (uq_work_sessions_active, uq_breaks_open).
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from worktime.core.authorization import require_access
from worktime.core.errors import (
    AlreadyActive,
    AlreadyCompleted,
    BreakInProgress,
    InvalidRange,
    InvalidState,
    NoOpenBreak,
    NotCompleted,
    NotFound,
    WorktimeError,
)
from worktime.models.edits import WorkSessionEdit
from worktime.models.user import User
from worktime.models.work_break import BREAK_TYPES, Break
from worktime.models.work_session import (
    ACTIVE_STATUSES,
    COMPLETED,
    ONGOING,
    PAUSED,
    WorkSession,
)
from worktime.services import audit_service
from worktime.services.durations import as_utc, elapsed_hours, net_duration, sum_breaks

logger = logging.getLogger(__name__)

UNSET: Any = object()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _get_active_session(db: Session, user_id: int) -> Optional[WorkSession]:
    return (
        db.query(WorkSession)
        .filter(
            WorkSession.user_id == int(user_id),
            WorkSession.status.in_(ACTIVE_STATUSES),
        )
        .first()
    )


def _get_open_break(db: Session, session_id: int) -> Optional[Break]:
    return (
        db.query(Break)
        .filter(
            Break.work_session_id == int(session_id),
            Break.end_time.is_(None),
        )
        .with_for_update()
        .first()
    )


def _load_for_actor(db: Session, actor: User, session_id: int, *, lock: bool) -> WorkSession:
    q = db.query(WorkSession).filter(WorkSession.id == int(session_id))
    if lock:
        q = q.with_for_update()

    session = q.first()
    if session is None:
        raise NotFound("Session not found")

    require_access(db, actor, session.user_id)
    return session


def get_current_session(db: Session, user_id: int) -> Optional[WorkSession]:
    return _get_active_session(db, user_id)


def get_session(db: Session, actor: User, session_id: int) -> WorkSession:
    return _load_for_actor(db, actor, session_id, lock=False)


def list_sessions(db: Session, user_id: int, *, limit: int = 30, offset: int = 0) -> list[WorkSession]:
    return (
        db.query(WorkSession)
        .filter(WorkSession.user_id == int(user_id))
        .order_by(WorkSession.start_time.desc())
        .offset(int(offset))
        .limit(int(limit))
        .all()
    )


def start_session(
    db: Session,
    *,
    user_id: int,
    note: Optional[str] = None,
    project: Optional[str] = None,
    started_at: Optional[datetime] = None,
) -> WorkSession:
    if _get_active_session(db, user_id) is not None:
        raise AlreadyActive("You already have an ongoing session. Please stop it first.")

    session = WorkSession(
        user_id=int(user_id),
        start_time=as_utc(started_at) or _utc_now(),
        end_time=None,
        status=ONGOING,
        note=note,
        project=project,
    )
    db.add(session)

    try:
        db.flush()
    except IntegrityError as exc:
        # lost the race against a concurrent start for the same user
        raise AlreadyActive("You already have an ongoing session. Please stop it first.") from exc

    logger.info(
        "Work session started",
        extra={"user_id": int(user_id), "work_session_id": session.id},
    )
    return session


def stop_session(
    db: Session,
    *,
    actor: User,
    session_id: int,
    ended_at: Optional[datetime] = None,
) -> WorkSession:
    session = _load_for_actor(db, actor, session_id, lock=True)

    if session.status == COMPLETED:
        raise AlreadyCompleted()

    stop_time = as_utc(ended_at) or _utc_now()
    total = elapsed_hours(session.start_time, stop_time)

    breaks = (
        db.query(Break)
        .filter(Break.work_session_id == session.id)
        .with_for_update()
        .all()
    )

    last_break_end = max((as_utc(b.end_time) for b in breaks if b.end_time is not None), default=None)
    if last_break_end is not None and stop_time < last_break_end:
        raise InvalidRange("Session cannot end before its last break ended")

    open_break = next((b for b in breaks if b.end_time is None), None)
    if open_break is not None:
        open_break.duration = elapsed_hours(open_break.start_time, stop_time)
        open_break.end_time = stop_time
        logger.info(
            "Open break closed by session stop",
            extra={"work_session_id": session.id, "break_id": open_break.id},
        )

    break_total = sum_breaks(breaks)

    session.end_time = stop_time
    session.status = COMPLETED
    session.total_duration = total
    session.break_duration = break_total
    session.net_duration = net_duration(total, break_total)

    db.flush()

    logger.info(
        "Work session stopped",
        extra={
            "user_id": session.user_id,
            "work_session_id": session.id,
            "total_hours": session.total_duration,
            "net_hours": session.net_duration,
        },
    )
    return session


def start_break(
    db: Session,
    *,
    actor: User,
    session_id: int,
    break_type: str = "UNPAID",
    note: Optional[str] = None,
    started_at: Optional[datetime] = None,
) -> Break:
    break_type = str(break_type or "UNPAID").upper()
    if break_type not in BREAK_TYPES:
        raise WorktimeError("Break type must be PAID or UNPAID")

    session = _load_for_actor(db, actor, session_id, lock=True)

    if session.status != ONGOING:
        raise InvalidState("Can only start break during an ongoing session")

    if _get_open_break(db, session.id) is not None:
        raise BreakInProgress()

    row = Break(
        work_session_id=session.id,
        start_time=as_utc(started_at) or _utc_now(),
        end_time=None,
        type=break_type,
        note=note,
    )
    db.add(row)
    session.status = PAUSED

    try:
        db.flush()
    except IntegrityError as exc:
        raise BreakInProgress() from exc

    logger.info(
        "Break started",
        extra={"work_session_id": session.id, "break_id": row.id, "type": break_type},
    )
    return row


def end_break(
    db: Session,
    *,
    actor: User,
    session_id: int,
    ended_at: Optional[datetime] = None,
) -> Break:
    session = _load_for_actor(db, actor, session_id, lock=True)

    open_break = _get_open_break(db, session.id)
    if open_break is None:
        raise NoOpenBreak()

    end_time = as_utc(ended_at) or _utc_now()
    open_break.duration = elapsed_hours(open_break.start_time, end_time)
    open_break.end_time = end_time
    session.status = ONGOING

    db.flush()

    logger.info(
        "Break ended",
        extra={
            "work_session_id": session.id,
            "break_id": open_break.id,
            "duration_hours": open_break.duration,
        },
    )
    return open_break


def edit_completed_session(
    db: Session,
    *,
    actor: User,
    session_id: int,
    reason: Optional[str],
    start_time: Any = UNSET,
    end_time: Any = UNSET,
    note: Any = UNSET,
    project: Any = UNSET,
) -> WorkSession:
    """
    Edit the bounds/note/project of a completed session.

    Breaks are not editable here; the stored break_duration is kept and the
    total/net durations are recomputed from the new bounds. The audit row is
    written before the session is updated, in the same transaction. An edit
    that changes nothing writes no audit row.
    """
    reason = audit_service.require_reason(reason)

    session = _load_for_actor(db, actor, session_id, lock=True)

    if session.status != COMPLETED:
        raise NotCompleted("Cannot edit ongoing session. Stop it first.")

    new_start = session.start_time if start_time is UNSET or start_time is None else as_utc(start_time)
    new_end = session.end_time if end_time is UNSET or end_time is None else as_utc(end_time)
    new_note = session.note if note is UNSET else note
    new_project = session.project if project is UNSET else project

    total = elapsed_hours(new_start, new_end)
    break_total = float(session.break_duration or 0.0)

    before = {
        "start_time": session.start_time,
        "end_time": session.end_time,
        "note": session.note,
        "project": session.project,
        "total_duration": session.total_duration,
        "net_duration": session.net_duration,
    }
    after = {
        "start_time": new_start,
        "end_time": new_end,
        "note": new_note,
        "project": new_project,
        "total_duration": total,
        "net_duration": net_duration(total, break_total),
    }

    changes = audit_service.diff_fields(before, after)
    if not changes:
        return session

    audit_service.record_session_edit(
        db,
        session_id=session.id,
        editor_id=actor.id,
        changes=changes,
        reason=reason,
    )

    for field, value in after.items():
        setattr(session, field, value)

    db.flush()
    return session


def get_session_history(db: Session, *, actor: User, session_id: int) -> list[WorkSessionEdit]:
    session = _load_for_actor(db, actor, session_id, lock=False)
    return audit_service.session_history(db, session.id)
