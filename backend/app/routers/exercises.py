import logging

from fastapi import APIRouter, Depends, Form, HTTPException, UploadFile, status
from fastapi import File as FastAPIFile
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import Pagination, get_current_user, get_pagination, require_admin
from ..models.exercise import Exercise, FavouriteExercise
from ..models.user import User
from ..models.workout import UserExercisePB, WorkoutLogExercise, WorkoutPlanExercise
from ..schemas.exercise import (
    ExerciseCreate,
    ExercisePage,
    ExerciseRead,
    FavouriteRead,
    FavouriteToggle,
    ImageUploadResult,
    StoredImageRead,
)
from ..schemas.user import SuccessResponse
from ..services.uploads import default_exercise_image, remove_exercise_media, store_exercise_images

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/exercises", tags=["exercises"])


@router.get("", response_model=ExercisePage)
def list_exercises(
    search: str | None = None,
    category: str | None = None,
    level: str | None = None,
    pagination: Pagination = Depends(get_pagination),
    _: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ExercisePage:
    query = db.query(Exercise)
    if search:
        query = query.filter(
            or_(Exercise.name.ilike(f"%{search}%"), Exercise.category.ilike(f"%{search}%"))
        )
    if category:
        query = query.filter(Exercise.category == category)
    if level:
        query = query.filter(Exercise.level == level)
    total = query.count()
    exercises = pagination.apply(query.order_by(Exercise.name))
    return ExercisePage(
        exercises=[ExerciseRead.model_validate(exercise) for exercise in exercises],
        total=total,
        page=pagination.page,
        limit=pagination.limit,
        total_pages=pagination.total_pages(total),
    )


@router.get("/favourites", response_model=list[FavouriteRead])
def list_favourites(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[Exercise]:
    return (
        db.query(Exercise)
        .join(FavouriteExercise, FavouriteExercise.exercise_id == Exercise.id)
        .filter(FavouriteExercise.user_id == current_user.id)
        .order_by(Exercise.name)
        .all()
    )


@router.get("/{exercise_id}", response_model=ExerciseRead)
def read_exercise(
    exercise_id: int,
    _: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Exercise:
    return _get_exercise_or_404(db, exercise_id)


@router.post("/{exercise_id}/favourite", response_model=FavouriteToggle)
def toggle_favourite(
    exercise_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> FavouriteToggle:
    _get_exercise_or_404(db, exercise_id)
    favourite = (
        db.query(FavouriteExercise)
        .filter(
            FavouriteExercise.user_id == current_user.id,
            FavouriteExercise.exercise_id == exercise_id,
        )
        .first()
    )
    if favourite:
        db.delete(favourite)
        is_favourite = False
    else:
        db.add(FavouriteExercise(user_id=current_user.id, exercise_id=exercise_id))
        is_favourite = True
    db.commit()
    return FavouriteToggle(exercise_id=exercise_id, is_favourite=is_favourite)


@router.post("", response_model=ExerciseRead, status_code=status.HTTP_201_CREATED)
def create_exercise(
    payload: ExerciseCreate,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Exercise:
    if db.query(Exercise).filter(Exercise.name == payload.name).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="An exercise with this name already exists"
        )
    data = payload.model_dump()
    data["image"] = data["image"] or default_exercise_image(payload.name)
    exercise = Exercise(**data)
    db.add(exercise)
    db.commit()
    db.refresh(exercise)
    return exercise


@router.delete("/{exercise_id}", response_model=SuccessResponse)
def delete_exercise(
    exercise_id: int,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    exercise = _get_exercise_or_404(db, exercise_id)
    name = exercise.name
    db.query(WorkoutPlanExercise).filter(WorkoutPlanExercise.exercise_id == exercise_id).delete(
        synchronize_session=False
    )
    db.query(UserExercisePB).filter(UserExercisePB.exercise_id == exercise_id).delete(
        synchronize_session=False
    )
    for logged in db.query(WorkoutLogExercise).filter(WorkoutLogExercise.exercise_id == exercise_id).all():
        db.delete(logged)
    db.delete(exercise)
    db.commit()
    remove_exercise_media(name)
    return SuccessResponse()


@router.post("/upload-images", response_model=ImageUploadResult)
async def upload_exercise_images(
    exercise_name: str | None = Form(default=None),
    images: list[UploadFile] | None = FastAPIFile(default=None),
    _: User = Depends(require_admin),
) -> ImageUploadResult:
    if not exercise_name or not exercise_name.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Exercise name is required")
    if not images:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No images provided")
    stored = await store_exercise_images(exercise_name, images)
    return ImageUploadResult(
        exercise_name=exercise_name,
        images=[StoredImageRead(**vars(image)) for image in stored],
        total_uploaded=len(stored),
    )


def _get_exercise_or_404(db: Session, exercise_id: int) -> Exercise:
    exercise = db.get(Exercise, exercise_id)
    if not exercise:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exercise not found")
    return exercise
