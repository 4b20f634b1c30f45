from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from worktime.core.authorization import Role, require_role
from worktime.database import get_db
from worktime.models.company import Company
from worktime.models.invite import Invite
from worktime.models.user import User
from worktime.schemas.invite import InviteAccept, InviteCreate, InviteResponse, InviteValidation
from worktime.schemas.user import UserResponse
from worktime.services import invite_service

router = APIRouter(prefix="/invites", tags=["Invites"])


def _to_response(invite: Invite) -> InviteResponse:
    response = InviteResponse.model_validate(invite)
    response.link = invite_service.invite_link(invite.token)
    return response


@router.post("", response_model=InviteResponse)
def create_invite(
    payload: InviteCreate,
    admin: User = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
):
    try:
        invite = invite_service.create_invite(db, admin=admin, email=payload.email, role=payload.role)
        db.commit()
        return _to_response(invite)
    except Exception:
        db.rollback()
        raise


@router.get("", response_model=list[InviteResponse])
def list_invites(
    admin: User = Depends(require_role(Role.ADMIN)),
    db: Session = Depends(get_db),
):
    rows = invite_service.list_invites(db, company_id=admin.company_id)
    return [_to_response(r) for r in rows]


@router.get("/{token}", response_model=InviteValidation)
def validate_invite(token: str, db: Session = Depends(get_db)):
    invite = invite_service.validate_invite(db, token)
    company = db.query(Company).filter(Company.id == invite.company_id).first()
    return InviteValidation(email=invite.email, company_name=company.name if company else "")


@router.post("/{token}/accept", response_model=UserResponse)
def accept_invite(token: str, payload: InviteAccept, db: Session = Depends(get_db)):
    try:
        user = invite_service.accept_invite(
            db,
            token,
            first_name=payload.first_name,
            last_name=payload.last_name,
        )
        db.commit()
        db.refresh(user)
        return UserResponse.model_validate(user)
    except Exception:
        db.rollback()
        raise
