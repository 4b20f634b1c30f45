from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from worktime.core.authorization import Role, require_role, require_user_access
from worktime.database import get_db
from worktime.deps.auth import require_auth
from worktime.models.user import User
from worktime.schemas.audit import WorkSessionEditResponse
from worktime.schemas.user import MonthlyStatsResponse, WeeklyStatsResponse
from worktime.services import audit_service, stats_service

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("/weekly", response_model=WeeklyStatsResponse)
def my_weekly_stats(
    weeks: int = Query(default=4, ge=1, le=52),
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    return stats_service.weekly_hours(db, user=actor, weeks=weeks)


@router.get("/weekly/{user_id}", response_model=WeeklyStatsResponse)
def user_weekly_stats(
    user_id: int,
    weeks: int = Query(default=4, ge=1, le=52),
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    user = require_user_access(db, actor, user_id)
    return stats_service.weekly_hours(db, user=user, weeks=weeks)


@router.get("/monthly", response_model=MonthlyStatsResponse)
def my_monthly_stats(
    year: Optional[int] = Query(default=None, ge=1970, le=9999),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    return stats_service.monthly_summary(db, user=actor, year=year, month=month)


@router.get("/monthly/{user_id}", response_model=MonthlyStatsResponse)
def user_monthly_stats(
    user_id: int,
    year: Optional[int] = Query(default=None, ge=1970, le=9999),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    user = require_user_access(db, actor, user_id)
    return stats_service.monthly_summary(db, user=user, year=year, month=month)


@router.get("/audit-log", response_model=list[WorkSessionEditResponse])
def audit_log(
    user_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    limit: int = Query(default=100, ge=1, le=500),
    admin: User = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
):
    if user_id is not None:
        require_user_access(db, admin, user_id)

    rows = audit_service.company_audit_log(
        db,
        company_id=admin.company_id,
        user_id=user_id,
        edited_from=start_date,
        edited_to=end_date,
        limit=limit,
    )
    return [WorkSessionEditResponse.model_validate(r) for r in rows]
