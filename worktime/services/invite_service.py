import logging
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from worktime.core.authorization import Role
from worktime.core.errors import EmailTaken, InviteConsumed, InviteExpired, NotFound, WorktimeError
from worktime.models.invite import Invite
from worktime.models.user import User
from worktime.services.durations import as_utc

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return int(v)
    except ValueError:
        return default


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def invite_link(token: str) -> str:
    base = os.getenv("FRONTEND_URL", "http://localhost:5173").rstrip("/")
    return f"{base}/register?token={token}"


def create_invite(
    db: Session,
    *,
    admin: User,
    email: str,
    role: str = Role.USER.value,
    now: Optional[datetime] = None,
) -> Invite:
    email = str(email).strip().lower()
    if "@" not in email:
        raise WorktimeError("Valid email is required")

    try:
        role = Role(str(role).upper()).value
    except ValueError as exc:
        raise WorktimeError("Role must be ADMIN or USER") from exc

    if db.query(User).filter(User.email == email).first() is not None:
        raise EmailTaken()

    now = as_utc(now) or _utc_now()
    invite = Invite(
        email=email,
        token=secrets.token_hex(32),
        company_id=int(admin.company_id),
        role=role,
        expires_at=now + timedelta(days=_env_int("INVITE_TTL_DAYS", 7)),
    )
    db.add(invite)
    db.flush()

    logger.info(
        "Invite created",
        extra={"invite_id": invite.id, "company_id": invite.company_id, "created_by": admin.id},
    )
    return invite


def list_invites(db: Session, *, company_id: int) -> list[Invite]:
    return (
        db.query(Invite)
        .filter(Invite.company_id == int(company_id))
        .order_by(Invite.created_at.desc(), Invite.id.desc())
        .all()
    )


def validate_invite(db: Session, token: str, *, now: Optional[datetime] = None) -> Invite:
    invite = db.query(Invite).filter(Invite.token == str(token)).first()
    if invite is None:
        raise NotFound("Invalid invite")

    if invite.used_at is not None:
        raise InviteConsumed()

    now = as_utc(now) or _utc_now()
    if now > as_utc(invite.expires_at):
        raise InviteExpired()

    return invite


def accept_invite(
    db: Session,
    token: str,
    *,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> User:
    now = as_utc(now) or _utc_now()
    invite = validate_invite(db, token, now=now)

    # conditional update: only one caller can flip used_at
    consumed = (
        db.query(Invite)
        .filter(Invite.id == invite.id, Invite.used_at.is_(None))
        .update({Invite.used_at: now}, synchronize_session=False)
    )
    if consumed != 1:
        raise InviteConsumed()

    if db.query(User).filter(User.email == invite.email).first() is not None:
        raise EmailTaken()

    user = User(
        company_id=invite.company_id,
        email=invite.email,
        first_name=first_name,
        last_name=last_name,
        role=invite.role,
    )
    db.add(user)
    db.flush()

    logger.info(
        "Invite accepted",
        extra={"invite_id": invite.id, "user_id": user.id, "company_id": user.company_id},
    )
    return user
