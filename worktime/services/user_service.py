import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from worktime.core.authorization import Role, is_admin, require_user_access
from worktime.core.errors import Forbidden, WorktimeError
from worktime.models.user import User
from worktime.models.work_session import ACTIVE_STATUSES, COMPLETED, WorkSession

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("role", "weekly_hours_target", "first_name", "last_name")


def online_status(db: Session, *, company_id: int) -> list[dict]:
    """
    Presence board for one company.

    A user with an ONGOING/PAUSED session is online since its start time;
    everyone else reports the end of their last completed session, if any.
    """
    users = (
        db.query(User)
        .filter(User.company_id == int(company_id))
        .order_by(User.email.asc())
        .all()
    )
    user_ids = [u.id for u in users]
    if not user_ids:
        return []

    active = {
        row.user_id: row
        for row in db.query(WorkSession)
        .filter(
            WorkSession.user_id.in_(user_ids),
            WorkSession.status.in_(ACTIVE_STATUSES),
        )
        .all()
    }

    last_seen = dict(
        db.query(WorkSession.user_id, func.max(WorkSession.end_time))
        .filter(
            WorkSession.user_id.in_(user_ids),
            WorkSession.status == COMPLETED,
        )
        .group_by(WorkSession.user_id)
        .all()
    )

    result = []
    for user in users:
        current = active.get(user.id)
        result.append(
            {
                "id": user.id,
                "email": user.email,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "online": current is not None,
                "status": current.status if current is not None else None,
                "time": current.start_time if current is not None else last_seen.get(user.id),
            }
        )
    return result


def update_user(db: Session, *, actor: User, user_id: int, changes: dict[str, Any]) -> User:
    target = require_user_access(db, actor, user_id)

    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise WorktimeError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

    if "role" in changes:
        if changes["role"] is None:
            raise WorktimeError("Role must be ADMIN or USER")
        if not is_admin(actor):
            raise Forbidden("Only admins can update roles")
        try:
            changes["role"] = Role(str(changes["role"]).upper()).value
        except ValueError as exc:
            raise WorktimeError("Role must be ADMIN or USER") from exc

    if "weekly_hours_target" in changes:
        target_hours = changes["weekly_hours_target"]
        if target_hours is None or float(target_hours) < 0:
            raise WorktimeError("Weekly hours target must be zero or more")
        changes["weekly_hours_target"] = float(target_hours)

    for name in ("first_name", "last_name"):
        if name in changes and changes[name] is not None:
            changes[name] = str(changes[name]).strip() or None

    for field, value in changes.items():
        setattr(target, field, value)
    db.flush()

    logger.info(
        "User updated",
        extra={"user_id": target.id, "updated_by": actor.id, "fields": sorted(changes)},
    )
    return target
