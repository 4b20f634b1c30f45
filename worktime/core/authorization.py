from enum import Enum

from fastapi import Depends
from sqlalchemy.orm import Session

from worktime.core.errors import Forbidden, NotFound
from worktime.deps.auth import require_auth
from worktime.models.user import User


class Role(Enum):
    ADMIN = "ADMIN"
    USER = "USER"


def is_admin(actor: User) -> bool:
    return str(actor.role).upper() == Role.ADMIN.value


def can_access(db: Session, actor: User, resource_owner_id: int) -> bool:
    """
    Single access predicate for every user-owned resource.

    Evaluated against the store on each call; company membership is never
    cached. Raises NotFound when the owner does not exist.
    """
    if int(actor.id) == int(resource_owner_id):
        return True

    if not is_admin(actor):
        return False

    owner = db.query(User).filter(User.id == int(resource_owner_id)).first()
    if owner is None:
        raise NotFound("User not found")

    return int(owner.company_id) == int(actor.company_id)


def require_access(db: Session, actor: User, resource_owner_id: int) -> None:
    if not can_access(db, actor, resource_owner_id):
        raise Forbidden("Access denied")


def require_user_access(db: Session, actor: User, user_id: int) -> User:
    """Resolve a user-scoped route target: NotFound first, then Forbidden."""
    target = db.query(User).filter(User.id == int(user_id)).first()
    if target is None:
        raise NotFound("User not found")

    require_access(db, actor, target.id)
    return target


def require_role(role: Role):
    rank = {
        Role.USER: 1,
        Role.ADMIN: 2,
    }

    def dependency(actor: User = Depends(require_auth)) -> User:
        try:
            actor_role = Role(str(actor.role).upper())
        except ValueError as exc:
            raise Forbidden("Invalid role") from exc

        if rank[actor_role] < rank[role]:
            raise Forbidden("Admin access required")

        return actor

    return dependency
