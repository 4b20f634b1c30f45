from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from worktime.core.authorization import Role, require_role, require_user_access
from worktime.database import get_db
from worktime.deps.auth import require_auth
from worktime.models.user import User
from worktime.schemas.user import OnlineStatusResponse, UserResponse, UserUpdate
from worktime.services import user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserResponse])
def list_users(
    admin: User = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
):
    rows = (
        db.query(User)
        .filter(User.company_id == int(admin.company_id))
        .order_by(User.email.asc())
        .all()
    )
    return rows


@router.get("/online", response_model=List[OnlineStatusResponse])
def online_users(
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    return user_service.online_status(db, company_id=actor.company_id)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    return require_user_access(db, actor, user_id)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    payload: UserUpdate,
    actor: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    try:
        user = user_service.update_user(
            db,
            actor=actor,
            user_id=user_id,
            changes=payload.model_dump(exclude_unset=True),
        )
        db.commit()
        return UserResponse.model_validate(user)
    except Exception:
        db.rollback()
        raise
