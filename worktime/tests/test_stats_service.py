from datetime import date, datetime, timedelta, timezone

import pytest

from worktime.core.errors import WorktimeError
from worktime.models.work_session import COMPLETED, WorkSession
from worktime.services.stats_service import month_bounds, monthly_summary, week_start, weekly_hours

NOW = datetime(2026, 3, 12, 18, 0, tzinfo=timezone.utc)  # Thursday


def _completed(db, user_id: int, start: datetime, net: float) -> None:
    db.add(
        WorkSession(
            user_id=user_id,
            start_time=start,
            end_time=start + timedelta(hours=net),
            status=COMPLETED,
            total_duration=net,
            break_duration=0.0,
            net_duration=net,
        )
    )


def test_week_start_is_monday():
    assert week_start(datetime(2026, 3, 12, 8, 0, tzinfo=timezone.utc)) == date(2026, 3, 9)
    assert week_start(datetime(2026, 3, 9, 0, 0, tzinfo=timezone.utc)) == date(2026, 3, 9)
    assert week_start(datetime(2026, 3, 15, 23, 0, tzinfo=timezone.utc)) == date(2026, 3, 9)


def test_weekly_hours_groups_net_duration(db, company_factory, user_factory):
    company = company_factory()
    user = user_factory(company_id=company.id, weekly_hours_target=38.5)

    for day, net in [(2, 7.5), (3, 8.0), (10, 6.0), (11, 2.0)]:
        _completed(db, user.id, datetime(2026, 3, day, 9, 0, tzinfo=timezone.utc), net)
    # outside the window
    old = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
    db.add(WorkSession(user_id=user.id, start_time=old, end_time=old, status=COMPLETED, net_duration=5.0))
    db.commit()

    stats = weekly_hours(db, user=user, weeks=2, now=NOW)

    assert stats["target"] == 38.5
    assert [w["week_start"] for w in stats["weeks"]] == [date(2026, 3, 2), date(2026, 3, 9)]
    assert stats["weeks"][0]["hours"] == pytest.approx(15.5)
    assert stats["weeks"][0]["sessions"] == 2
    assert stats["weeks"][1]["hours"] == pytest.approx(8.0)


def test_month_bounds_wraps_december():
    assert month_bounds(2026, 12) == (
        datetime(2026, 12, 1, tzinfo=timezone.utc),
        datetime(2027, 1, 1, tzinfo=timezone.utc),
    )


def test_month_bounds_rejects_bad_month():
    with pytest.raises(WorktimeError):
        month_bounds(2026, 13)


def test_monthly_summary_counts_sessions_started_in_month(db, company_factory, user_factory):
    user = user_factory(company_id=company_factory().id)

    _completed(db, user.id, datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc), 7.5)
    _completed(db, user.id, datetime(2026, 3, 2, 18, 0, tzinfo=timezone.utc), 1.5)
    _completed(db, user.id, datetime(2026, 3, 31, 20, 0, tzinfo=timezone.utc), 2.0)
    # neighbouring months
    _completed(db, user.id, datetime(2026, 4, 1, 0, 0, tzinfo=timezone.utc), 4.0)
    _completed(db, user.id, datetime(2026, 2, 28, 23, 0, tzinfo=timezone.utc), 3.0)
    db.commit()

    summary = monthly_summary(db, user=user, year=2026, month=3)

    assert summary["year"] == 2026
    assert summary["month"] == 3
    assert summary["total_hours"] == pytest.approx(11.0)
    assert summary["total_sessions"] == 3
    assert summary["avg_session_duration"] == pytest.approx(11.0 / 3)
    assert summary["days_worked"] == 2


def test_monthly_summary_defaults_to_current_month(db, company_factory, user_factory):
    user = user_factory(company_id=company_factory().id)

    summary = monthly_summary(db, user=user, now=NOW)

    assert (summary["year"], summary["month"]) == (2026, 3)
    assert summary["total_sessions"] == 0
    assert summary["avg_session_duration"] == 0.0
