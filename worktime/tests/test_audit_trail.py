from datetime import datetime, timedelta, timezone

import pytest

from worktime.core.errors import ReasonRequired, TypeImmutable
from worktime.database import SessionLocal
from worktime.models.edits import WorkSessionEdit
from worktime.models.time_entry import TimeEntry
from worktime.models.work_session import WorkSession
from worktime.services import audit_service, session_engine, time_entry_service
from worktime.services.audit_service import FieldChange
from worktime.services.durations import as_utc

T9 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def user(company_factory, user_factory):
    company = company_factory()
    return user_factory(company_id=company.id)


def _completed_session(db, user) -> WorkSession:
    session = session_engine.start_session(db, user_id=user.id, started_at=T9)
    session_engine.stop_session(db, actor=user, session_id=session.id, ended_at=T9 + timedelta(hours=8))
    db.commit()
    return session


def test_diff_fields_only_reports_changed_values():
    before = {"note": "a", "project": None, "start_time": T9}
    after = {
        "note": "b",
        "project": None,
        # same instant, different representation
        "start_time": T9.replace(tzinfo=None),
    }

    changes = audit_service.diff_fields(before, after)

    assert changes == {"note": FieldChange(old="a", new="b")}


def test_serialized_changes_use_iso_timestamps():
    changes = {"end_time": FieldChange(old=T9, new=T9 + timedelta(hours=1))}

    assert audit_service.serialize_changes(changes) == {
        "end_time": {"old": "2026-03-02T09:00:00+00:00", "new": "2026-03-02T10:00:00+00:00"}
    }


def test_require_reason_rejects_blank():
    for blank in (None, "", "  \t"):
        with pytest.raises(ReasonRequired):
            audit_service.require_reason(blank)
    assert audit_service.require_reason("  typo ") == "typo"


def test_history_newest_first_and_stable(db, user):
    session = _completed_session(db, user)

    for i, note in enumerate(["first", "second", "third"]):
        session_engine.edit_completed_session(
            db, actor=user, session_id=session.id, reason=f"edit {i}", note=note
        )
        db.commit()

    history = session_engine.get_session_history(db, actor=user, session_id=session.id)
    assert [h.reason for h in history] == ["edit 2", "edit 1", "edit 0"]
    assert history[0].changes["note"] == {"old": "second", "new": "third"}

    again = session_engine.get_session_history(db, actor=user, session_id=session.id)
    assert [h.id for h in again] == [h.id for h in history]


def test_failed_audit_write_rolls_back_edit(db, user, monkeypatch):
    session = _completed_session(db, user)

    def _boom(*args, **kwargs):
        raise RuntimeError("audit store unavailable")

    monkeypatch.setattr(audit_service, "record_session_edit", _boom)

    with pytest.raises(RuntimeError):
        session_engine.edit_completed_session(
            db,
            actor=user,
            session_id=session.id,
            reason="move end",
            end_time=T9 + timedelta(hours=10),
        )
    db.rollback()

    check = SessionLocal()
    try:
        row = check.query(WorkSession).filter(WorkSession.id == session.id).first()
        assert as_utc(row.end_time) == T9 + timedelta(hours=8)
        assert row.total_duration == pytest.approx(8.0)
        assert check.query(WorkSessionEdit).count() == 0
    finally:
        check.close()


def test_company_audit_log_is_company_scoped(db, company_factory, user_factory):
    company_a = company_factory("A")
    company_b = company_factory("B")
    alice = user_factory(company_id=company_a.id)
    bob = user_factory(company_id=company_b.id)

    for owner in (alice, bob):
        session = _completed_session(db, owner)
        session_engine.edit_completed_session(
            db, actor=owner, session_id=session.id, reason="fix", note=f"by {owner.id}"
        )
        db.commit()

    rows = audit_service.company_audit_log(db, company_id=company_a.id)
    assert len(rows) == 1
    assert rows[0].edited_by == alice.id

    assert audit_service.company_audit_log(db, company_id=company_a.id, user_id=bob.id) == []


def _ledger(db, user):
    start = time_entry_service.create_time_entry(db, user_id=user.id, time=T9, entry_type="START")
    stop = time_entry_service.create_time_entry(
        db, user_id=user.id, time=T9 + timedelta(hours=4), entry_type="STOP", note="done"
    )
    db.commit()
    return start, stop


def test_time_entry_edit_records_history(db, user):
    start, _ = _ledger(db, user)

    time_entry_service.edit_time_entry(
        db,
        actor=user,
        time_entry_id=start.id,
        reason="badge reader late",
        time=T9 - timedelta(minutes=10),
    )
    db.commit()

    history = time_entry_service.get_time_entry_history(db, actor=user, time_entry_id=start.id)
    assert len(history) == 1
    assert history[0].changes == {
        "time": {"old": "2026-03-02T09:00:00+00:00", "new": "2026-03-02T08:50:00+00:00"}
    }


def test_time_entry_type_is_immutable(db, user):
    start, _ = _ledger(db, user)

    with pytest.raises(TypeImmutable):
        time_entry_service.edit_time_entry(
            db, actor=user, time_entry_id=start.id, reason="flip", entry_type="STOP"
        )
    db.rollback()

    check = SessionLocal()
    try:
        assert check.query(TimeEntry).filter(TimeEntry.id == start.id).first().type == "START"
    finally:
        check.close()
    assert time_entry_service.get_time_entry_history(db, actor=user, time_entry_id=start.id) == []


def test_time_entry_same_type_is_accepted(db, user):
    start, _ = _ledger(db, user)

    entry = time_entry_service.edit_time_entry(
        db, actor=user, time_entry_id=start.id, reason="note", entry_type="start", note="gate 3"
    )
    db.commit()

    assert entry.note == "gate 3"
    assert entry.type == "START"


def test_time_entry_edit_requires_reason(db, user):
    start, _ = _ledger(db, user)

    with pytest.raises(ReasonRequired):
        time_entry_service.edit_time_entry(db, actor=user, time_entry_id=start.id, reason="", note="x")
