import logging
from collections import Counter
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy import extract
from sqlalchemy.orm import Session

from ..core.enums import ReactionType
from ..core.security import is_admin_role
from ..database import get_db
from ..dependencies import Pagination, get_current_user, get_pagination
from ..models.challenge import Challenge, Comment, Participant, Post, Reaction
from ..models.user import User
from ..schemas.challenge import (
    AccessRead,
    Author,
    CalendarDay,
    ChallengeRead,
    ChallengeStats,
    CommentCreate,
    CommentRead,
    FeedPage,
    FeedPost,
    PostCreate,
    PostPage,
    PostRead,
    PostUpdate,
    PostWithAuthor,
    ReactionBody,
    ReactionRead,
    ReactionToggle,
    ReactionToggleResult,
    TodayPost,
)
from ..schemas.user import SuccessResponse
from ..services.challenges import (
    active_challenge,
    active_participation,
    ensure_posting_participant,
    require_active_participation,
    resolve_challenge_id,
)
from ..services.streaks import challenge_streak, day_span, days_passed, days_remaining
from ..services.uploads import read_image_as_data_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ninety-day-challenge", tags=["challenge"])


@router.get("/check-access", response_model=AccessRead)
def check_access(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AccessRead:
    participant = active_participation(db, current_user.id)
    if participant:
        return AccessRead(
            is_enabled=True,
            challenge_id=participant.challenge_id,
            challenge_title=participant.challenge.title,
        )
    if is_admin_role(current_user.role):
        challenge = active_challenge(db)
        if challenge:
            return AccessRead(is_enabled=True, challenge_id=challenge.id, challenge_title=challenge.title)
    return AccessRead(is_enabled=False)


@router.get("/info", response_model=ChallengeRead)
def read_challenge_info(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Challenge:
    return require_active_participation(db, current_user).challenge


@router.get("/stats", response_model=ChallengeStats)
def read_challenge_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ChallengeStats:
    participant = require_active_participation(db, current_user)
    challenge = participant.challenge
    today = date.today()
    elapsed = days_passed(challenge.start_date, today)
    post_dates = [
        row[0]
        for row in db.query(Post.date)
        .filter(Post.user_id == current_user.id, Post.challenge_id == challenge.id)
        .all()
    ]
    total_participants = (
        db.query(Participant)
        .filter(Participant.challenge_id == challenge.id, Participant.is_enabled.is_(True))
        .count()
    )
    return ChallengeStats(
        total_days=day_span(challenge.start_date, challenge.end_date),
        days_passed=elapsed,
        days_remaining=days_remaining(challenge.end_date, today),
        completed_days=len(post_dates),
        streak=challenge_streak(post_dates, today, elapsed),
        total_participants=total_participants,
    )


@router.get("/posts", response_model=PostPage)
def list_posts(
    pagination: Pagination = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PostPage:
    challenge_id = resolve_challenge_id(db, current_user)
    query = db.query(Post).filter(Post.challenge_id == challenge_id)
    total = query.count()
    posts = pagination.apply(query.order_by(Post.date.desc(), Post.created_at.desc()))
    return PostPage(
        posts=[
            PostWithAuthor(
                **PostRead.model_validate(post).model_dump(),
                author=_author(post.user),
                reactions=[ReactionRead.model_validate(reaction) for reaction in post.reactions],
            )
            for post in posts
        ],
        total=total,
        page=pagination.page,
        limit=pagination.limit,
        total_pages=pagination.total_pages(total),
    )


@router.post("/posts", response_model=PostRead, status_code=status.HTTP_201_CREATED)
async def create_post(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Post:
    payload = await _read_post_payload(request, current_user)
    participant = ensure_posting_participant(db, current_user)
    duplicate = (
        db.query(Post)
        .filter(
            Post.user_id == current_user.id,
            Post.challenge_id == participant.challenge_id,
            Post.date == payload.date,
        )
        .first()
    )
    if duplicate:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Post already exists for this date"
        )
    post = Post(
        user_id=current_user.id,
        challenge_id=participant.challenge_id,
        participant_id=participant.id,
        **payload.model_dump(),
    )
    db.add(post)
    participant.completed_days += 1
    participant.last_active_date = datetime.utcnow()
    db.commit()
    db.refresh(post)
    return post


@router.put("/posts/{post_id}", response_model=PostRead)
def update_post(
    post_id: int,
    payload: PostUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Post:
    post = db.get(Post, post_id)
    if not post or post.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Post not found or unauthorized"
        )
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(post, field, value)
    db.commit()
    db.refresh(post)
    return post


@router.get("/posts/today", response_model=TodayPost)
def read_post_for_day(
    day: date = Query(alias="date"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TodayPost:
    challenge_id = resolve_challenge_id(db, current_user)
    post = (
        db.query(Post)
        .filter(Post.user_id == current_user.id, Post.challenge_id == challenge_id, Post.date == day)
        .first()
    )
    return TodayPost(post=PostRead.model_validate(post) if post else None)


@router.get("/posts/calendar", response_model=list[CalendarDay])
def read_post_calendar(
    month: int = Query(ge=1, le=12),
    year: int = Query(ge=2000, le=2100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[CalendarDay]:
    challenge_id = resolve_challenge_id(db, current_user)
    posts = (
        db.query(Post)
        .filter(
            Post.user_id == current_user.id,
            Post.challenge_id == challenge_id,
            extract("month", Post.date) == month,
            extract("year", Post.date) == year,
        )
        .order_by(Post.date)
        .all()
    )
    return [
        CalendarDay(date=post.date, has_post=True, mood=post.mood, energy=post.energy)
        for post in posts
    ]


@router.get("/community-feed", response_model=FeedPage)
def read_community_feed(
    day: date | None = Query(default=None, alias="date"),
    pagination: Pagination = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> FeedPage:
    participant = active_participation(db, current_user.id)
    if participant:
        challenge_id = participant.challenge_id
    elif is_admin_role(current_user.role):
        challenge = active_challenge(db)
        if not challenge:
            return FeedPage(posts=[], total=0, page=pagination.page, limit=pagination.limit, total_pages=0)
        challenge_id = challenge.id
    else:
        challenge_id = resolve_challenge_id(db, current_user)

    query = db.query(Post).filter(Post.challenge_id == challenge_id)
    if day:
        query = query.filter(Post.date == day)
    total = query.count()
    posts = pagination.apply(query.order_by(Post.date.desc(), Post.created_at.desc()))
    return FeedPage(
        posts=[_feed_post(post, current_user.id) for post in posts],
        total=total,
        page=pagination.page,
        limit=pagination.limit,
        total_pages=pagination.total_pages(total),
    )


@router.post("/reactions", response_model=ReactionToggleResult)
def toggle_reaction(
    payload: ReactionToggle,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ReactionToggleResult:
    participant = active_participation(db, current_user.id)
    if participant:
        challenge_id = participant.challenge_id
    else:
        challenge = active_challenge(db) if is_admin_role(current_user.role) else None
        if not challenge:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Not enabled for this challenge"
            )
        challenge_id = challenge.id
    post = db.get(Post, payload.post_id)
    if not post or post.challenge_id != challenge_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    reaction = _own_reaction(db, current_user.id, post.id)
    if reaction is None:
        reaction = Reaction(user_id=current_user.id, post_id=post.id, reaction_type=payload.type)
        db.add(reaction)
        action = "added"
    elif reaction.reaction_type == payload.type:
        db.delete(reaction)
        db.commit()
        return ReactionToggleResult(action="removed")
    else:
        reaction.reaction_type = payload.type
        action = "updated"
    db.commit()
    db.refresh(reaction)
    return ReactionToggleResult(action=action, reaction=ReactionRead.model_validate(reaction))


@router.post("/posts/{post_id}/reactions", response_model=ReactionRead)
def set_reaction(
    post_id: int,
    payload: ReactionBody,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Reaction:
    post = _get_accessible_post(db, current_user, post_id)
    reaction = _own_reaction(db, current_user.id, post.id)
    if reaction is None:
        reaction = Reaction(user_id=current_user.id, post_id=post.id)
        db.add(reaction)
    reaction.reaction_type = payload.reaction_type
    db.commit()
    db.refresh(reaction)
    return reaction


@router.delete("/posts/{post_id}/reactions", response_model=SuccessResponse)
def remove_reaction(
    post_id: int,
    payload: ReactionBody,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    post = _get_accessible_post(db, current_user, post_id)
    reaction = _own_reaction(db, current_user.id, post.id)
    if reaction is None or reaction.reaction_type != payload.reaction_type:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reaction not found")
    db.delete(reaction)
    db.commit()
    return SuccessResponse()


@router.post("/comments", response_model=CommentRead, status_code=status.HTTP_201_CREATED)
def create_comment(
    payload: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CommentRead:
    content = payload.content.strip()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Comment content is required")
    post = db.get(Post, payload.post_id)
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    participant = _enabled_participant(db, current_user.id, post.challenge_id)
    if not participant and not is_admin_role(current_user.role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Not enabled for this challenge"
        )
    comment = Comment(
        post_id=post.id,
        user_id=current_user.id,
        participant_id=participant.id if participant else None,
        content=content,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return _comment_read(comment)


@router.delete("/comments/{comment_id}", response_model=SuccessResponse)
def delete_comment(
    comment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    comment = db.get(Comment, comment_id)
    if not comment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    if comment.user_id != current_user.id and not is_admin_role(current_user.role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    db.delete(comment)
    db.commit()
    return SuccessResponse()


async def _read_post_payload(request: Request, user: User) -> PostCreate:
    """Accept a post as JSON or as a multipart form with photo files."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        data: dict = {
            key: value
            for key, value in form.items()
            if key != "photos" and isinstance(value, str) and value != ""
        }
        photos: list[str] = []
        for item in form.getlist("photos"):
            if isinstance(item, str):
                if item:
                    photos.append(item)
                continue
            url, size = await read_image_as_data_url(item)
            logger.info(
                "Challenge photo from user %s: %s, %d bytes", user.id, item.content_type, size
            )
            photos.append(url)
        data["photos"] = photos
    else:
        try:
            data = await request.json()
        except ValueError as exc:
            raise RequestValidationError(
                [{"type": "json_invalid", "loc": ("body",), "msg": "Invalid JSON body", "input": None}]
            ) from exc
    try:
        return PostCreate.model_validate(data)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False, include_context=False))


def _author(user: User) -> Author:
    return Author(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        username=user.username,
        image_url=user.image_url,
        display_name=user.display_name,
        is_admin=is_admin_role(user.role),
    )


def _comment_read(comment: Comment) -> CommentRead:
    return CommentRead(
        id=comment.id,
        post_id=comment.post_id,
        user_id=comment.user_id,
        content=comment.content,
        created_at=comment.created_at,
        author=_author(comment.user),
    )


def _feed_post(post: Post, viewer_id: int) -> FeedPost:
    counts = Counter(reaction.reaction_type.value for reaction in post.reactions)
    viewer_reaction = next(
        (reaction.reaction_type for reaction in post.reactions if reaction.user_id == viewer_id),
        None,
    )
    return FeedPost(
        **PostRead.model_validate(post).model_dump(),
        author=_author(post.user),
        reactions=[ReactionRead.model_validate(reaction) for reaction in post.reactions],
        comments=[_comment_read(comment) for comment in post.comments],
        reaction_counts={kind.value: counts.get(kind.value, 0) for kind in ReactionType},
        user_reaction=viewer_reaction,
    )


def _own_reaction(db: Session, user_id: int, post_id: int) -> Reaction | None:
    return (
        db.query(Reaction)
        .filter(Reaction.user_id == user_id, Reaction.post_id == post_id)
        .first()
    )


def _enabled_participant(db: Session, user_id: int, challenge_id: int) -> Participant | None:
    return (
        db.query(Participant)
        .filter(
            Participant.user_id == user_id,
            Participant.challenge_id == challenge_id,
            Participant.is_enabled.is_(True),
        )
        .first()
    )


def _get_accessible_post(db: Session, user: User, post_id: int) -> Post:
    post = db.get(Post, post_id)
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    if not is_admin_role(user.role) and not _enabled_participant(db, user.id, post.challenge_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Not enabled for this challenge"
        )
    return post
