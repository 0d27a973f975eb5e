from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_current_user, require_admin
from ..models.user import User
from ..schemas.user import MembershipRead, MembershipUpdate
from ..services.membership import derive_status, expire_if_needed, membership_state

router = APIRouter(tags=["membership"])


@router.get("/membership", response_model=MembershipRead)
def read_my_membership(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MembershipRead:
    today = date.today()
    if expire_if_needed(current_user, today):
        db.commit()
        db.refresh(current_user)
    return _membership_read(current_user, today)


@router.get("/admin/users/{user_id}/membership", response_model=MembershipRead)
def read_user_membership(
    user_id: int,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> MembershipRead:
    user = _get_user_or_404(db, user_id)
    return _membership_read(user, date.today())


@router.put("/admin/users/{user_id}/membership", response_model=MembershipRead)
def set_user_membership(
    user_id: int,
    payload: MembershipUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> MembershipRead:
    user = _get_user_or_404(db, user_id)
    today = date.today()
    end_date, derived_status = derive_status(payload.start_date, payload.duration, today)
    user.membership_start_date = payload.start_date
    user.membership_end_date = end_date
    user.membership_duration = payload.duration
    user.membership_status = payload.status or derived_status
    user.membership_notes = payload.notes
    user.membership_set_by = current_user.id
    db.commit()
    db.refresh(user)
    return _membership_read(user, today)


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def _membership_read(user: User, today: date) -> MembershipRead:
    state = membership_state(user, today)
    return MembershipRead(
        start_date=user.membership_start_date,
        end_date=user.membership_end_date,
        duration=user.membership_duration,
        status=user.membership_status,
        notes=user.membership_notes,
        set_by=user.membership_set_by,
        days_remaining=state.days_remaining,
        is_expired=state.is_expired,
        is_active=state.is_active,
        has_valid_membership=state.has_valid_membership,
    )
