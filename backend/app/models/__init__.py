from .user import User, Invitation, AdminSettings
from .exercise import Exercise, FavouriteExercise
from .workout import (
    AssignedWorkout,
    SetLog,
    UserExercisePB,
    WorkoutLog,
    WorkoutLogExercise,
    WorkoutPlan,
    WorkoutPlanExercise,
)
from .steps import StepGoal, StepLog
from .challenge import Challenge, Comment, Participant, Post, Reaction
from .progression import TrainingProgression

__all__ = [
    "User",
    "Invitation",
    "AdminSettings",
    "Exercise",
    "FavouriteExercise",
    "WorkoutPlan",
    "WorkoutPlanExercise",
    "AssignedWorkout",
    "WorkoutLog",
    "WorkoutLogExercise",
    "SetLog",
    "UserExercisePB",
    "StepGoal",
    "StepLog",
    "Challenge",
    "Participant",
    "Post",
    "Reaction",
    "Comment",
    "TrainingProgression",
]
