"""
One-time batch: rebuild WorkSession rows from the legacy START/STOP ledger.

A START directly followed by a STOP becomes one completed session with no
breaks. Any other START or STOP is an orphan and becomes a zero-duration
completed session at its own timestamp, flagged in the note for manual
review. Nothing is inferred about missing data.

Each user is migrated in its own transaction together with a
LegacyMigration marker; users that already carry a marker are skipped, so
re-running the batch never duplicates sessions. A failure on one user is
rolled back and reported without stopping the others.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from sqlalchemy.orm import Session

from worktime.models.legacy_migration import LegacyMigration
from worktime.models.time_entry import START, STOP, TimeEntry
from worktime.models.work_session import COMPLETED, WorkSession
from worktime.services.durations import as_utc, elapsed_hours

logger = logging.getLogger(__name__)

ORPHAN_NOTE_PREFIX = "[legacy-reconcile]"


@dataclass(frozen=True)
class LegacyEvent:
    time: datetime
    type: str
    note: Optional[str] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class ReconciledSession:
    start_time: datetime
    end_time: datetime
    total_duration: float
    break_duration: float
    net_duration: float
    note: Optional[str]
    flagged: bool = False
    orphan_type: Optional[str] = None


@dataclass
class ReconciliationReport:
    migrated: dict[int, int] = field(default_factory=dict)
    orphans: dict[int, int] = field(default_factory=dict)
    skipped: list[int] = field(default_factory=list)
    failures: dict[int, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


def _orphan_note(event_type: str, original: Optional[str]) -> str:
    note = f"{ORPHAN_NOTE_PREFIX} orphaned {event_type}; review required"
    if original:
        note = f"{note} | {original}"
    return note


def _orphan(event) -> ReconciledSession:
    at = as_utc(event.time)
    return ReconciledSession(
        start_time=at,
        end_time=at,
        total_duration=0.0,
        break_duration=0.0,
        net_duration=0.0,
        note=_orphan_note(event.type, event.note),
        flagged=True,
        orphan_type=event.type,
    )


def pair_legacy_events(events: Iterable) -> list[ReconciledSession]:
    """Turn one user's ledger events (anything with time/type/note) into sessions."""
    ordered = sorted(events, key=lambda e: (as_utc(e.time), getattr(e, "id", None) or 0))

    sessions: list[ReconciledSession] = []
    i = 0
    while i < len(ordered):
        event = ordered[i]
        following = ordered[i + 1] if i + 1 < len(ordered) else None

        if event.type == START and following is not None and following.type == STOP:
            start = as_utc(event.time)
            end = as_utc(following.time)
            total = elapsed_hours(start, end)
            sessions.append(
                ReconciledSession(
                    start_time=start,
                    end_time=end,
                    total_duration=total,
                    break_duration=0.0,
                    net_duration=total,
                    note=event.note or following.note or None,
                )
            )
            i += 2
            continue

        sessions.append(_orphan(event))
        i += 1

    return sessions


def _users_with_ledger(db: Session, user_ids: Optional[Sequence[int]]) -> list[int]:
    q = db.query(TimeEntry.user_id).distinct()
    if user_ids is not None:
        q = q.filter(TimeEntry.user_id.in_([int(u) for u in user_ids]))
    return sorted(int(row[0]) for row in q.all())


def _migrate_user(db: Session, user_id: int, now: datetime) -> tuple[int, int]:
    entries = (
        db.query(TimeEntry)
        .filter(TimeEntry.user_id == int(user_id))
        .order_by(TimeEntry.time.asc(), TimeEntry.id.asc())
        .all()
    )

    sessions = pair_legacy_events(entries)
    orphans = 0

    for s in sessions:
        if s.flagged:
            orphans += 1
            logger.warning(
                "Orphaned legacy entry converted to zero-duration session",
                extra={"user_id": int(user_id), "orphan_type": s.orphan_type, "time": s.start_time},
            )

        db.add(
            WorkSession(
                user_id=int(user_id),
                start_time=s.start_time,
                end_time=s.end_time,
                status=COMPLETED,
                total_duration=s.total_duration,
                break_duration=s.break_duration,
                net_duration=s.net_duration,
                note=s.note,
            )
        )

    db.add(
        LegacyMigration(
            user_id=int(user_id),
            sessions_created=len(sessions),
            orphans_flagged=orphans,
            migrated_at=now,
        )
    )
    db.flush()
    return len(sessions), orphans


def reconcile_legacy_ledger(
    db: Session,
    *,
    user_ids: Optional[Sequence[int]] = None,
    now: Optional[datetime] = None,
) -> ReconciliationReport:
    """Commits per user. The passed Session must not carry pending work."""
    now = now or datetime.now(timezone.utc)
    report = ReconciliationReport()

    already = {int(row[0]) for row in db.query(LegacyMigration.user_id).all()}

    for user_id in _users_with_ledger(db, user_ids):
        if user_id in already:
            report.skipped.append(user_id)
            continue

        try:
            created, orphans = _migrate_user(db, user_id, now)
            db.commit()
        except Exception as exc:
            db.rollback()
            logger.exception(
                "Legacy reconciliation failed for user",
                extra={"user_id": user_id},
            )
            report.failures[user_id] = str(exc)
            continue

        report.migrated[user_id] = created
        report.orphans[user_id] = orphans
        logger.info(
            "Legacy ledger reconciled",
            extra={"user_id": user_id, "sessions_created": created, "orphans_flagged": orphans},
        )

    return report


def main() -> int:
    from worktime.core.logging import configure_logging
    from worktime.database import session_scope

    configure_logging()

    with session_scope() as db:
        report = reconcile_legacy_ledger(db)

    logger.info(
        "Legacy reconciliation finished",
        extra={
            "migrated_users": len(report.migrated),
            "skipped_users": len(report.skipped),
            "failed_users": sorted(report.failures),
        },
    )
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
