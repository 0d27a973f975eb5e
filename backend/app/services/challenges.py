from datetime import datetime

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from ..core.security import is_admin_role
from ..models.challenge import Challenge, Participant
from ..models.user import User

NO_ACTIVE_CHALLENGE = "No active challenge found"


def active_participation(db: Session, user_id: int) -> Participant | None:
    """Enabled participant row whose challenge is currently active."""
    return (
        db.query(Participant)
        .join(Challenge, Challenge.id == Participant.challenge_id)
        .filter(
            Participant.user_id == user_id,
            Participant.is_enabled.is_(True),
            Challenge.is_active.is_(True),
        )
        .first()
    )


def require_active_participation(db: Session, user: User) -> Participant:
    participant = active_participation(db, user.id)
    if not participant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NO_ACTIVE_CHALLENGE)
    return participant


def active_challenge(db: Session) -> Challenge | None:
    return (
        db.query(Challenge)
        .filter(Challenge.is_active.is_(True))
        .order_by(Challenge.created_at.desc())
        .first()
    )


def resolve_challenge_id(db: Session, user: User) -> int:
    """Challenge whose feed the user sees; admins fall back to the active challenge."""
    participant = active_participation(db, user.id)
    if participant:
        return participant.challenge_id
    if is_admin_role(user.role):
        challenge = active_challenge(db)
        if challenge:
            return challenge.id
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NO_ACTIVE_CHALLENGE)


def ensure_posting_participant(db: Session, user: User) -> Participant:
    """Participant the user posts as, enrolling admins into the active challenge."""
    participant = active_participation(db, user.id)
    if participant:
        return participant
    if not is_admin_role(user.role):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NO_ACTIVE_CHALLENGE)
    challenge = active_challenge(db)
    if not challenge:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NO_ACTIVE_CHALLENGE)
    participant = (
        db.query(Participant)
        .filter(Participant.user_id == user.id, Participant.challenge_id == challenge.id)
        .first()
    )
    if participant:
        participant.is_enabled = True
    else:
        participant = Participant(
            user_id=user.id,
            challenge_id=challenge.id,
            is_enabled=True,
            joined_at=datetime.utcnow(),
        )
        db.add(participant)
    db.flush()
    return participant
