import logging
from typing import Sequence

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import TrackingType
from ..models.exercise import Exercise
from ..models.workout import SetLog, UserExercisePB, WorkoutLog, WorkoutLogExercise
from ..schemas.workout import LoggedExerciseIn, SetIn

logger = logging.getLogger(__name__)


def tracking_type_for(sets: Sequence[SetIn]) -> TrackingType:
    if sets and sets[0].exercise_duration:
        return TrackingType.DURATION
    return TrackingType.REPS


def ensure_exercises_exist(db: Session, exercise_ids: Sequence[int]) -> None:
    wanted = set(exercise_ids)
    if not wanted:
        return
    found = {row[0] for row in db.query(Exercise.id).filter(Exercise.id.in_(wanted)).all()}
    missing = wanted - found
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown exercise ids: {sorted(missing)}",
        )


def fill_log_exercises(log: WorkoutLog, exercises: Sequence[LoggedExerciseIn]) -> None:
    """Append logged exercises to ``log``; sets are numbered from 1."""
    for item in exercises:
        logged = WorkoutLogExercise(
            exercise_id=item.exercise_id, tracking_type=tracking_type_for(item.sets)
        )
        for order, set_in in enumerate(item.sets, start=1):
            logged.sets.append(
                SetLog(
                    weight=set_in.weight,
                    reps=set_in.reps,
                    exercise_duration=set_in.exercise_duration,
                    order=order,
                )
            )
        log.exercises.append(logged)


def apply_set_updates(logged: WorkoutLogExercise, sets: Sequence[SetIn]) -> None:
    """Update sets positionally, creating extra ones and dropping the surplus."""
    existing = list(logged.sets)
    for index, set_in in enumerate(sets):
        if index < len(existing):
            current = existing[index]
            current.weight = set_in.weight
            current.reps = set_in.reps
            current.exercise_duration = set_in.exercise_duration
            current.order = index + 1
        else:
            logged.sets.append(
                SetLog(
                    weight=set_in.weight,
                    reps=set_in.reps,
                    exercise_duration=set_in.exercise_duration,
                    order=index + 1,
                )
            )
    for surplus in existing[len(sets):]:
        logged.sets.remove(surplus)


def beats_personal_best(
    best: UserExercisePB | None,
    weight: float | None,
    reps: int | None,
    duration: int | None,
) -> bool:
    if not weight or not (reps or duration):
        return False
    if best is None:
        return True
    if weight > best.weight:
        return True
    if weight == best.weight:
        if reps and reps > (best.reps or 0):
            return True
        if duration and duration > (best.exercise_duration or 0):
            return True
    return False


def update_personal_bests(db: Session, user_id: int, log: WorkoutLog) -> None:
    """Record new personal bests from ``log``; failures are logged and skipped."""
    for logged in log.exercises:
        try:
            with db.begin_nested():
                best = (
                    db.query(UserExercisePB)
                    .filter(
                        UserExercisePB.user_id == user_id,
                        UserExercisePB.exercise_id == logged.exercise_id,
                    )
                    .first()
                )
                for set_log in logged.sets:
                    if not beats_personal_best(
                        best, set_log.weight, set_log.reps, set_log.exercise_duration
                    ):
                        continue
                    if best is None:
                        best = UserExercisePB(user_id=user_id, exercise_id=logged.exercise_id)
                        db.add(best)
                    best.weight = set_log.weight
                    best.reps = set_log.reps
                    best.exercise_duration = set_log.exercise_duration
                    best.workout_log_id = log.id
        except SQLAlchemyError:
            logger.exception(
                "Failed to update personal best for user %s exercise %s",
                user_id,
                logged.exercise_id,
            )
