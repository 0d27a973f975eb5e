from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_admin
from ..models.progression import TrainingProgression
from ..models.user import User
from ..schemas.progression import ProgressionCreate, ProgressionList, ProgressionRead, ProgressionUpdate
from ..services.streaks import weeks_between

router = APIRouter(prefix="/admin", tags=["admin-progressions"])


@router.get("/training-progressions", response_model=ProgressionList)
def list_progressions(
    user_id: int | None = None,
    active: bool | None = None,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ProgressionList:
    query = db.query(TrainingProgression)
    if user_id is not None:
        query = query.filter(TrainingProgression.user_id == user_id)
    if active is not None:
        query = query.filter(TrainingProgression.is_active.is_(active))
    progressions = query.order_by(TrainingProgression.created_at.desc()).all()
    return ProgressionList(
        progressions=[ProgressionRead.model_validate(item) for item in progressions],
        total=len(progressions),
    )


@router.post(
    "/training-progressions", response_model=ProgressionRead, status_code=status.HTTP_201_CREATED
)
def create_progression(
    payload: ProgressionCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> TrainingProgression:
    if not db.get(User, payload.user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    active = (
        db.query(TrainingProgression)
        .filter(
            TrainingProgression.user_id == payload.user_id,
            TrainingProgression.is_active.is_(True),
        )
        .first()
    )
    if active:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already has an active training progression",
        )
    progression = TrainingProgression(
        user_id=payload.user_id,
        training_type=payload.training_type,
        target_weeks=payload.target_weeks,
        start_date=payload.start_date or date.today(),
        notes=payload.notes,
        assigned_by=current_user.id,
    )
    db.add(progression)
    db.commit()
    db.refresh(progression)
    return progression


@router.patch("/training-progressions/{progression_id}", response_model=ProgressionRead)
def update_progression(
    progression_id: int,
    payload: ProgressionUpdate,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> TrainingProgression:
    progression = db.get(TrainingProgression, progression_id)
    if not progression:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Progression not found")
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(progression, field, value)
    if progression.is_completed and progression.end_date:
        progression.actual_weeks = weeks_between(progression.start_date, progression.end_date)
    db.commit()
    db.refresh(progression)
    return progression


@router.get("/users/{user_id}/training-progressions", response_model=list[ProgressionRead])
def list_user_progressions(
    user_id: int,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[TrainingProgression]:
    if not db.get(User, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return (
        db.query(TrainingProgression)
        .filter(TrainingProgression.user_id == user_id)
        .order_by(TrainingProgression.start_date.desc())
        .all()
    )
