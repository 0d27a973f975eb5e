from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import Pagination, get_pagination, require_admin
from ..models.challenge import Challenge, Comment, Participant, Post, Reaction
from ..models.user import User
from ..schemas.challenge import (
    ChallengeCreate,
    ChallengeDetail,
    ChallengeListItem,
    ChallengeRead,
    ChallengeUpdate,
    ParticipantCreate,
    ParticipantDetail,
    ParticipantPost,
    ParticipantPostPage,
    ParticipantRead,
    ParticipantStats,
    ParticipantToggle,
    PostRead,
    PostSummary,
)
from ..schemas.user import SuccessResponse
from ..services.streaks import challenge_streak, completion_rate, day_span, days_passed

router = APIRouter(prefix="/admin/ninety-day-challenge", tags=["admin-challenge"])


@router.get("", response_model=list[ChallengeListItem])
def list_challenges(
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[ChallengeListItem]:
    counts = dict(
        db.query(Participant.challenge_id, func.count(Participant.id))
        .group_by(Participant.challenge_id)
        .all()
    )
    challenges = db.query(Challenge).order_by(Challenge.created_at.desc()).all()
    return [
        ChallengeListItem(
            **ChallengeRead.model_validate(challenge).model_dump(),
            participant_count=counts.get(challenge.id, 0),
        )
        for challenge in challenges
    ]


@router.post("", response_model=ChallengeRead, status_code=status.HTTP_201_CREATED)
def create_challenge(
    payload: ChallengeCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Challenge:
    _validate_dates(payload.start_date, payload.end_date)
    challenge = Challenge(**payload.model_dump(), created_by=current_user.id)
    db.add(challenge)
    db.commit()
    db.refresh(challenge)
    return challenge


@router.put("/{challenge_id}", response_model=ChallengeRead)
def update_challenge(
    challenge_id: int,
    payload: ChallengeUpdate,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Challenge:
    challenge = _get_challenge_or_404(db, challenge_id)
    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(challenge, field, value)
    _validate_dates(challenge.start_date, challenge.end_date)
    db.commit()
    db.refresh(challenge)
    return challenge


@router.delete("/{challenge_id}", response_model=SuccessResponse)
def delete_challenge(
    challenge_id: int,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    challenge = _get_challenge_or_404(db, challenge_id)
    db.delete(challenge)
    db.commit()
    return SuccessResponse()


@router.get("/challenges/{challenge_id}", response_model=ChallengeDetail)
def read_challenge(
    challenge_id: int,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ChallengeDetail:
    challenge = _get_challenge_or_404(db, challenge_id)
    participants = [item for item in challenge.participants if item.is_enabled]
    return ChallengeDetail(
        **ChallengeRead.model_validate(challenge).model_dump(),
        participants=[
            ParticipantDetail(
                **ParticipantRead.model_validate(participant).model_dump(),
                posts=[PostSummary.model_validate(post) for post in participant.posts],
            )
            for participant in participants
        ],
    )


@router.get("/participants", response_model=list[ParticipantRead])
def list_participants(
    challenge_id: int | None = None,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[Participant]:
    query = db.query(Participant)
    if challenge_id is not None:
        query = query.filter(Participant.challenge_id == challenge_id)
    return query.order_by(Participant.joined_at.desc()).all()


@router.post("/participants", response_model=ParticipantRead, status_code=status.HTTP_201_CREATED)
def add_participant(
    payload: ParticipantCreate,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Participant:
    if not db.get(User, payload.user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    _get_challenge_or_404(db, payload.challenge_id)
    existing = (
        db.query(Participant)
        .filter(
            Participant.user_id == payload.user_id,
            Participant.challenge_id == payload.challenge_id,
        )
        .first()
    )
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="User is already a participant"
        )
    participant = Participant(
        user_id=payload.user_id, challenge_id=payload.challenge_id, is_enabled=False
    )
    db.add(participant)
    db.commit()
    db.refresh(participant)
    return participant


@router.patch("/participants/{participant_id}", response_model=ParticipantRead)
def toggle_participant(
    participant_id: int,
    payload: ParticipantToggle,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Participant:
    participant = _get_participant_or_404(db, participant_id)
    participant.is_enabled = payload.is_enabled
    db.commit()
    db.refresh(participant)
    return participant


@router.delete("/participants/{participant_id}", response_model=SuccessResponse)
def remove_participant(
    participant_id: int,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    participant = _get_participant_or_404(db, participant_id)
    db.query(Comment).filter(Comment.participant_id == participant.id).update(
        {Comment.participant_id: None}, synchronize_session=False
    )
    db.delete(participant)
    db.commit()
    return SuccessResponse()


@router.get("/participants/{participant_id}/posts", response_model=ParticipantPostPage)
def list_participant_posts(
    participant_id: int,
    pagination: Pagination = Depends(get_pagination),
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ParticipantPostPage:
    _get_participant_or_404(db, participant_id)
    query = db.query(Post).filter(Post.participant_id == participant_id)
    total = query.count()
    posts = pagination.apply(query.order_by(Post.date.desc()))
    reaction_counts = dict(
        db.query(Reaction.post_id, func.count(Reaction.id))
        .filter(Reaction.post_id.in_([post.id for post in posts]))
        .group_by(Reaction.post_id)
        .all()
    )
    return ParticipantPostPage(
        posts=[
            ParticipantPost(
                **PostRead.model_validate(post).model_dump(),
                reaction_count=reaction_counts.get(post.id, 0),
            )
            for post in posts
        ],
        total=total,
        page=pagination.page,
        limit=pagination.limit,
        total_pages=pagination.total_pages(total),
    )


@router.get("/participants/{participant_id}/stats", response_model=ParticipantStats)
def read_participant_stats(
    participant_id: int,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ParticipantStats:
    participant = _get_participant_or_404(db, participant_id)
    challenge = participant.challenge
    today = date.today()
    elapsed = days_passed(challenge.start_date, today)
    post_dates = [post.date for post in participant.posts]
    completed = len(post_dates)
    return ParticipantStats(
        total_days=day_span(challenge.start_date, challenge.end_date),
        days_passed=elapsed,
        completed_days=completed,
        streak=challenge_streak(post_dates, today, elapsed),
        completion_rate=completion_rate(completed, elapsed),
        last_post_date=max(post_dates) if post_dates else None,
    )


def _validate_dates(start: date, end: date) -> None:
    if end < start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="End date must be after start date"
        )


def _get_challenge_or_404(db: Session, challenge_id: int) -> Challenge:
    challenge = db.get(Challenge, challenge_id)
    if not challenge:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Challenge not found")
    return challenge


def _get_participant_or_404(db: Session, participant_id: int) -> Participant:
    participant = db.get(Participant, participant_id)
    if not participant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Participant not found")
    return participant
