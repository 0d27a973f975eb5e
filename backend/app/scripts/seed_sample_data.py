from __future__ import annotations

from datetime import date, timedelta

from sqlalchemy.orm import Session

from app.core.enums import TrackingType, UserRole
from app.core.security import get_password_hash
from app.database import SessionLocal
from app.models.challenge import Challenge, Participant
from app.models.exercise import Exercise
from app.models.steps import StepGoal
from app.models.user import User
from app.models.workout import WorkoutPlan, WorkoutPlanExercise
from app.services.uploads import default_exercise_image

SAMPLE_EXERCISES = [
    {
        "name": "Barbell Squat",
        "primary_muscles": ["quadriceps"],
        "secondary_muscles": ["glutes", "hamstrings"],
        "force": "push",
        "level": "intermediate",
        "mechanic": "compound",
        "equipment": "barbell",
        "category": "strength",
        "instructions": ["Set the bar on your upper back.", "Squat until thighs are parallel."],
    },
    {
        "name": "Push-Up",
        "primary_muscles": ["chest"],
        "secondary_muscles": ["triceps", "shoulders"],
        "force": "push",
        "level": "beginner",
        "mechanic": "compound",
        "equipment": "body only",
        "category": "strength",
        "instructions": ["Keep a straight line from head to heels.", "Lower until your chest nearly touches the floor."],
    },
    {
        "name": "Plank",
        "primary_muscles": ["abdominals"],
        "level": "beginner",
        "mechanic": "isolation",
        "equipment": "body only",
        "category": "strength",
        "instructions": ["Hold a straight body position on your forearms."],
    },
]


def ensure_user(
    db: Session,
    *,
    email: str,
    first_name: str,
    role: UserRole,
    password: str,
) -> User:
    user = db.query(User).filter_by(email=email).first()
    if user:
        return user
    user = User(
        email=email,
        first_name=first_name,
        role=role,
        password_hash=get_password_hash(password),
    )
    db.add(user)
    db.flush()
    return user


def ensure_exercises(db: Session) -> list[Exercise]:
    exercises = []
    for data in SAMPLE_EXERCISES:
        exercise = db.query(Exercise).filter_by(name=data["name"]).first()
        if not exercise:
            exercise = Exercise(image=default_exercise_image(data["name"]), **data)
            db.add(exercise)
        exercises.append(exercise)
    db.flush()
    return exercises


def ensure_system_routine(db: Session, exercises: list[Exercise]) -> WorkoutPlan:
    routine = (
        db.query(WorkoutPlan)
        .filter(WorkoutPlan.is_system_routine.is_(True), WorkoutPlan.name == "Full Body Starter")
        .first()
    )
    if routine:
        return routine
    routine = WorkoutPlan(
        name="Full Body Starter",
        notes="Three movements, three sets each.",
        is_system_routine=True,
        system_routine_category="full-body",
        training_type="strength",
    )
    for order, exercise in enumerate(exercises):
        is_hold = exercise.name == "Plank"
        routine.exercises.append(
            WorkoutPlanExercise(
                exercise_id=exercise.id,
                sets=3,
                tracking_type=TrackingType.DURATION if is_hold else TrackingType.REPS,
                reps=None if is_hold else 10,
                exercise_duration=45 if is_hold else None,
                order=order,
            )
        )
    db.add(routine)
    return routine


def ensure_challenge(db: Session, *, admin: User, member: User) -> Challenge:
    challenge = db.query(Challenge).filter(Challenge.is_active.is_(True)).first()
    if not challenge:
        start = date.today() - timedelta(days=7)
        challenge = Challenge(
            title="90-Day Challenge",
            description="Post your sleep, meals and mood every day.",
            start_date=start,
            end_date=start + timedelta(days=90),
            is_active=True,
            created_by=admin.id,
        )
        db.add(challenge)
        db.flush()
    participant = (
        db.query(Participant)
        .filter(Participant.user_id == member.id, Participant.challenge_id == challenge.id)
        .first()
    )
    if not participant:
        db.add(Participant(user_id=member.id, challenge_id=challenge.id, is_enabled=True))
    return challenge


def ensure_step_goal(db: Session, *, admin: User, member: User) -> None:
    if db.query(StepGoal).filter(StepGoal.user_id == member.id, StepGoal.is_active.is_(True)).first():
        return
    db.add(
        StepGoal(
            user_id=member.id,
            assigned_by=admin.id,
            daily_target=8000,
            start_date=date.today(),
            end_date=date.today() + timedelta(weeks=2),
            is_active=True,
        )
    )


def main() -> None:
    db = SessionLocal()
    try:
        admin = ensure_user(
            db,
            email="admin@example.com",
            first_name="Admin",
            role=UserRole.SUPER_ADMIN,
            password="secret123",
        )
        member = ensure_user(
            db,
            email="member@example.com",
            first_name="Member",
            role=UserRole.USER,
            password="secret123",
        )
        exercises = ensure_exercises(db)
        ensure_system_routine(db, exercises)
        ensure_challenge(db, admin=admin, member=member)
        ensure_step_goal(db, admin=admin, member=member)
        db.commit()
        print("✅ Seed data ready. Users: admin@example.com / member@example.com (pass: secret123)")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
