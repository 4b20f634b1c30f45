from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from worktime.core.authorization import require_user_access
from worktime.database import get_db
from worktime.deps.auth import require_auth
from worktime.models.user import User
from worktime.models.work_session import WorkSession
from worktime.schemas.audit import WorkSessionEditResponse
from worktime.schemas.session import (
    BreakResponse,
    EditSessionRequest,
    StartBreakRequest,
    StartSessionRequest,
    StopSessionRequest,
    WorkSessionResponse,
)
from worktime.services import session_engine

router = APIRouter(
    prefix="/sessions",
    tags=["Work Sessions"],
)


def _to_response(session: WorkSession) -> WorkSessionResponse:
    return WorkSessionResponse.model_validate(session)


@router.get("/current", response_model=Optional[WorkSessionResponse])
def get_current_session(
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    session = session_engine.get_current_session(db, actor.id)
    if session is None:
        return None
    return _to_response(session)


@router.get("/me", response_model=list[WorkSessionResponse])
def list_my_sessions(
    limit: int = Query(default=30, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    rows = session_engine.list_sessions(db, actor.id, limit=limit, offset=offset)
    return [_to_response(r) for r in rows]


@router.get("/user/{user_id}", response_model=list[WorkSessionResponse])
def list_user_sessions(
    user_id: int,
    limit: int = Query(default=30, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    target = require_user_access(db, actor, user_id)
    rows = session_engine.list_sessions(db, target.id, limit=limit, offset=offset)
    return [_to_response(r) for r in rows]


@router.post("/start", response_model=WorkSessionResponse)
def start_session(
    payload: StartSessionRequest,
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    try:
        session = session_engine.start_session(
            db,
            user_id=actor.id,
            note=payload.note,
            project=payload.project,
        )
        db.commit()
        return _to_response(session)
    except Exception:
        db.rollback()
        raise


@router.post("/{session_id}/stop", response_model=WorkSessionResponse)
def stop_session(
    session_id: int,
    payload: Optional[StopSessionRequest] = None,
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    ended_at = payload.end_time if payload is not None else None
    try:
        session = session_engine.stop_session(db, actor=actor, session_id=session_id, ended_at=ended_at)
        db.commit()
        db.refresh(session)
        return _to_response(session)
    except Exception:
        db.rollback()
        raise


@router.post("/{session_id}/break/start", response_model=BreakResponse)
def start_break(
    session_id: int,
    payload: Optional[StartBreakRequest] = None,
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    payload = payload or StartBreakRequest()
    try:
        row = session_engine.start_break(
            db,
            actor=actor,
            session_id=session_id,
            break_type=payload.type,
            note=payload.note,
        )
        db.commit()
        return BreakResponse.model_validate(row)
    except Exception:
        db.rollback()
        raise


@router.post("/{session_id}/break/end", response_model=BreakResponse)
def end_break(
    session_id: int,
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    try:
        row = session_engine.end_break(db, actor=actor, session_id=session_id)
        db.commit()
        return BreakResponse.model_validate(row)
    except Exception:
        db.rollback()
        raise


@router.get("/{session_id}", response_model=WorkSessionResponse)
def get_session(
    session_id: int,
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    return _to_response(session_engine.get_session(db, actor, session_id))


@router.put("/{session_id}", response_model=WorkSessionResponse)
def edit_session(
    session_id: int,
    payload: EditSessionRequest,
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    fields = payload.model_dump(exclude_unset=True, exclude={"reason"})
    try:
        session = session_engine.edit_completed_session(
            db,
            actor=actor,
            session_id=session_id,
            reason=payload.reason,
            **fields,
        )
        db.commit()
        db.refresh(session)
        return _to_response(session)
    except Exception:
        db.rollback()
        raise


@router.get("/{session_id}/history", response_model=list[WorkSessionEditResponse])
def get_session_history(
    session_id: int,
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    rows = session_engine.get_session_history(db, actor=actor, session_id=session_id)
    return [WorkSessionEditResponse.model_validate(r) for r in rows]
