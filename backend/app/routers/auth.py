from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..core.enums import InviteStatus
from ..core.security import create_access_token, get_password_hash, verify_password
from ..database import get_db
from ..dependencies import get_current_user
from ..models.user import Invitation, User
from ..schemas.user import Token, UserCreate, UserRead

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register_user(user_in: UserCreate, db: Session = Depends(get_db)) -> User:
    existing = db.query(User).filter(User.email == user_in.email).first()
    if existing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered.")

    user = User(
        email=user_in.email,
        first_name=user_in.first_name,
        last_name=user_in.last_name,
        username=user_in.username,
        password_hash=get_password_hash(user_in.password),
    )
    invitation = _pending_invitation(db, user_in.email)
    if invitation:
        user.role = invitation.role
        invitation.status = InviteStatus.ACCEPTED
        invitation.accepted_at = datetime.utcnow()
    elif db.query(User).count() > 0:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invitation required.")

    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.post("/login", response_model=Token)
def login(email: str, password: str, db: Session = Depends(get_db)) -> Token:
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials.")
    return Token(access_token=_issue_token(user))


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(get_current_user)) -> User:
    return current_user


@router.post("/refresh", response_model=Token)
def refresh_token(current_user: User = Depends(get_current_user)) -> Token:
    return Token(access_token=_issue_token(current_user))


def _issue_token(user: User) -> str:
    return create_access_token(user.id, user.role)


def _pending_invitation(db: Session, email: str) -> Invitation | None:
    return (
        db.query(Invitation)
        .filter(Invitation.email == email, Invitation.status == InviteStatus.PENDING)
        .order_by(Invitation.created_at.desc())
        .first()
    )
