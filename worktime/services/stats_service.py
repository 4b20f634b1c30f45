from datetime import date, datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from worktime.core.errors import WorktimeError
from worktime.models.user import User
from worktime.models.work_session import WorkSession
from worktime.services.durations import as_utc


def week_start(value: datetime) -> date:
    """Monday of the UTC week containing value."""
    day = as_utc(value).date()
    return day - timedelta(days=day.weekday())


def weekly_hours(
    db: Session,
    *,
    user: User,
    weeks: int = 4,
    now: Optional[datetime] = None,
) -> dict:
    now = as_utc(now) or datetime.now(timezone.utc)
    since = now - timedelta(days=7 * int(weeks))

    rows = (
        db.query(WorkSession)
        .filter(
            WorkSession.user_id == int(user.id),
            WorkSession.start_time >= since,
        )
        .order_by(WorkSession.start_time.asc())
        .all()
    )

    buckets: dict[date, dict] = {}
    for row in rows:
        key = week_start(row.start_time)
        bucket = buckets.setdefault(key, {"week_start": key, "hours": 0.0, "sessions": 0})
        bucket["hours"] += float(row.net_duration or 0.0)
        bucket["sessions"] += 1

    return {
        "weeks": [buckets[k] for k in sorted(buckets)],
        "target": float(user.weekly_hours_target or 0.0),
    }


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """[first instant, first instant of next month) in UTC."""
    if not 1 <= int(month) <= 12:
        raise WorktimeError("Month must be between 1 and 12")

    start = datetime(int(year), int(month), 1, tzinfo=timezone.utc)
    if int(month) == 12:
        end = datetime(int(year) + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(int(year), int(month) + 1, 1, tzinfo=timezone.utc)
    return start, end


def monthly_summary(
    db: Session,
    *,
    user: User,
    year: Optional[int] = None,
    month: Optional[int] = None,
    now: Optional[datetime] = None,
) -> dict:
    now = as_utc(now) or datetime.now(timezone.utc)
    year = int(year or now.year)
    month = int(month or now.month)
    start, end = month_bounds(year, month)

    rows = (
        db.query(WorkSession)
        .filter(
            WorkSession.user_id == int(user.id),
            WorkSession.start_time >= start,
            WorkSession.start_time < end,
        )
        .all()
    )

    total_hours = sum(float(r.net_duration or 0.0) for r in rows)
    total_sessions = len(rows)

    return {
        "year": year,
        "month": month,
        "total_hours": total_hours,
        "total_sessions": total_sessions,
        "avg_session_duration": total_hours / total_sessions if total_sessions else 0.0,
        "days_worked": len({as_utc(r.start_time).date() for r in rows}),
    }
