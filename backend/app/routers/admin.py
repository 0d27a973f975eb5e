import logging
from datetime import date

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..core.enums import ADMIN_ROLES, AssignmentStatus, InviteStatus, UserRole
from ..core.security import is_admin_role
from ..database import get_db
from ..dependencies import (
    Pagination,
    get_current_user,
    get_pagination,
    require_admin,
    require_super_admin,
)
from ..models.challenge import Comment, Participant, Post, Reaction
from ..models.exercise import FavouriteExercise
from ..models.progression import TrainingProgression
from ..models.steps import StepGoal, StepLog
from ..models.user import AdminSettings, Invitation, User
from ..models.workout import AssignedWorkout, UserExercisePB, WorkoutLog, WorkoutPlan
from ..schemas.user import (
    AdminAddRequest,
    AdminAddResult,
    AdminCheck,
    AdminSettingsRead,
    AdminSettingsUpdate,
    AdminSetupRequest,
    AdminUserList,
    AdminUserRow,
    AdminUserUpdate,
    InvitationCreate,
    InvitationRead,
    SuccessResponse,
    UserRead,
    UserSummary,
)
from ..schemas.workout import AssignmentRead, ProgressStats, UserProgress, WorkoutLogRead
from ..services.notifications import send_invitation_email
from ..services.streaks import round_half_up, workout_streak

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/check-auth", response_model=AdminCheck)
def check_auth(current_user: User = Depends(get_current_user)) -> AdminCheck:
    return AdminCheck(
        is_admin=is_admin_role(current_user.role),
        user_id=current_user.id,
        role=current_user.role,
    )


@router.post("/setup", response_model=UserRead)
def setup_first_admin(
    payload: AdminSetupRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    existing_admin = db.query(User).filter(User.role.in_(ADMIN_ROLES)).first()
    if existing_admin:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Admin already exists")
    if payload.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="You can only set up yourself as admin"
        )
    current_user.role = UserRole.SUPER_ADMIN
    db.commit()
    db.refresh(current_user)
    logger.info("User %s became the first super admin", current_user.id)
    return current_user


@router.get("/settings", response_model=AdminSettingsRead)
def read_settings(
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> AdminSettings:
    return _load_settings(db)


@router.patch("/settings", response_model=AdminSettingsRead)
def update_settings(
    payload: AdminSettingsUpdate,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> AdminSettings:
    admin_settings = _load_settings(db)
    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(admin_settings, field, value)
    db.commit()
    db.refresh(admin_settings)
    return admin_settings


@router.get("/settings/admins", response_model=list[UserRead])
def list_admins(
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[User]:
    return (
        db.query(User)
        .filter(User.role.in_(ADMIN_ROLES))
        .order_by(User.created_at.desc())
        .all()
    )


@router.post("/settings/admins", response_model=AdminAddResult)
def add_admin(
    payload: AdminAddRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
) -> AdminAddResult:
    user = db.query(User).filter(User.email == payload.email).first()
    if user:
        if is_admin_role(user.role):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User is already an admin")
        user.role = UserRole.ADMIN
        db.commit()
        db.refresh(user)
        logger.info("User %s promoted to admin by %s", user.id, current_user.id)
        return AdminAddResult(user=UserRead.model_validate(user))

    invitation = _pending_invitation(db, payload.email)
    if invitation is None:
        invitation = Invitation(email=payload.email, role=UserRole.ADMIN, invited_by=current_user.id)
        db.add(invitation)
        db.commit()
        db.refresh(invitation)
        background_tasks.add_task(
            send_invitation_email, invitation.email, invitation.role, current_user.display_name
        )
    return AdminAddResult(invitation=InvitationRead.model_validate(invitation))


@router.delete("/settings/admins/{user_id}", response_model=SuccessResponse)
def remove_admin(
    user_id: int,
    current_user: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot remove yourself as admin"
        )
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    user.role = UserRole.USER
    db.commit()
    logger.info("User %s demoted to user by %s", user.id, current_user.id)
    return SuccessResponse()


@router.post("/invitations", response_model=InvitationRead, status_code=status.HTTP_201_CREATED)
def create_invitation(
    payload: InvitationCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Invitation:
    if is_admin_role(payload.role) and current_user.role != UserRole.SUPER_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Only super admins can invite admins."
        )
    if db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists.")
    invitation = _pending_invitation(db, payload.email)
    if invitation:
        return invitation
    invitation = Invitation(email=payload.email, role=payload.role, invited_by=current_user.id)
    db.add(invitation)
    db.commit()
    db.refresh(invitation)
    background_tasks.add_task(
        send_invitation_email, invitation.email, invitation.role, current_user.display_name
    )
    return invitation


@router.get("/invitations", response_model=list[InvitationRead])
def list_invitations(
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[Invitation]:
    return db.query(Invitation).order_by(Invitation.created_at.desc()).all()


@router.delete("/invitations/{invitation_id}", response_model=InvitationRead)
def revoke_invitation(
    invitation_id: int,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Invitation:
    invitation = db.get(Invitation, invitation_id)
    if not invitation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found.")
    if invitation.status != InviteStatus.PENDING:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invitation already processed.")
    invitation.status = InviteStatus.REVOKED
    db.commit()
    db.refresh(invitation)
    return invitation


@router.get("/users", response_model=AdminUserList)
def list_users(
    search: str | None = None,
    role: str | None = None,
    pagination: Pagination = Depends(get_pagination),
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> AdminUserList:
    query = db.query(User)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                User.email.ilike(pattern),
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
                User.username.ilike(pattern),
            )
        )
    if role and role.lower() != "all":
        try:
            query = query.filter(User.role == UserRole(role.upper()))
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown role.")
    total = query.count()
    users = pagination.apply(query.order_by(User.created_at.desc()))
    return AdminUserList(
        users=[
            AdminUserRow(
                **UserRead.model_validate(user).model_dump(),
                assigned_workout_count=len(user.assigned_workouts),
            )
            for user in users
        ],
        total=total,
        page=pagination.page,
        limit=pagination.limit,
        total_pages=pagination.total_pages(total),
    )


@router.get("/users/search", response_model=list[UserSummary])
def search_users(
    q: str = "",
    limit: int = Query(default=10, ge=1, le=50),
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[User]:
    term = q.strip()
    if not term:
        return []
    pattern = f"%{term}%"
    return (
        db.query(User)
        .filter(
            or_(
                User.email.ilike(pattern),
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
                User.username.ilike(pattern),
            )
        )
        .order_by(User.email)
        .limit(limit)
        .all()
    )


@router.get("/users/{user_id}", response_model=UserRead)
def read_user(
    user_id: int,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> User:
    return _get_user_or_404(db, user_id)


@router.patch("/users/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    payload: AdminUserUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> User:
    user = _get_user_or_404(db, user_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    new_role = changes.get("role")
    if new_role is not None and new_role != user.role:
        touches_super_admin = UserRole.SUPER_ADMIN in (new_role, user.role)
        if touches_super_admin and current_user.role != UserRole.SUPER_ADMIN:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        logger.info(
            "User %s role changed from %s to %s by %s",
            user.id,
            user.role.value,
            new_role.value,
            current_user.id,
        )
    for field, value in changes.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return user


@router.delete("/users/{user_id}", response_model=SuccessResponse)
def delete_user(
    user_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    if user_id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete yourself")
    user = _get_user_or_404(db, user_id)
    _delete_user_rows(db, user)
    db.delete(user)
    db.commit()
    logger.info("User %s deleted by %s", user_id, current_user.id)
    return SuccessResponse()


@router.get("/users/{user_id}/progress", response_model=UserProgress)
def read_user_progress(
    user_id: int,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> UserProgress:
    user = _get_user_or_404(db, user_id)
    assignments = (
        db.query(AssignedWorkout)
        .filter(AssignedWorkout.user_id == user_id)
        .order_by(AssignedWorkout.assigned_at.desc())
        .all()
    )
    logs = (
        db.query(WorkoutLog)
        .filter(WorkoutLog.user_id == user_id, WorkoutLog.in_progress.is_(False))
        .order_by(WorkoutLog.date.desc())
        .limit(50)
        .all()
    )
    total_workouts, avg_duration = (
        db.query(func.count(WorkoutLog.id), func.avg(WorkoutLog.duration))
        .filter(WorkoutLog.user_id == user_id, WorkoutLog.in_progress.is_(False))
        .one()
    )
    log_dates = [
        row[0]
        for row in db.query(WorkoutLog.date)
        .filter(WorkoutLog.user_id == user_id, WorkoutLog.in_progress.is_(False))
        .distinct()
        .all()
    ]

    total = len(assignments)
    by_status = {status_: 0 for status_ in AssignmentStatus}
    for assignment in assignments:
        by_status[assignment.status] += 1
    completed = by_status[AssignmentStatus.COMPLETED]

    return UserProgress(
        user=UserRead.model_validate(user),
        assignments=[AssignmentRead.model_validate(item) for item in assignments],
        workout_logs=[WorkoutLogRead.model_validate(log) for log in logs],
        stats=ProgressStats(
            total_assignments=total,
            completed_assignments=completed,
            absent_assignments=by_status[AssignmentStatus.ABSENT],
            skipped_assignments=by_status[AssignmentStatus.SKIPPED],
            completion_rate=round_half_up(completed / total * 100) if total else 0,
            avg_workout_duration=round_half_up(float(avg_duration)) if avg_duration else 0,
            total_workouts=total_workouts,
            streak_days=workout_streak(log_dates, date.today()),
        ),
    )


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def _load_settings(db: Session) -> AdminSettings:
    admin_settings = db.query(AdminSettings).first()
    if admin_settings is None:
        admin_settings = AdminSettings(
            require_approval=False, auto_assign_workouts=False, email_notifications=True
        )
        db.add(admin_settings)
        db.commit()
        db.refresh(admin_settings)
    return admin_settings


def _pending_invitation(db: Session, email: str) -> Invitation | None:
    return (
        db.query(Invitation)
        .filter(Invitation.email == email, Invitation.status == InviteStatus.PENDING)
        .first()
    )


def _delete_user_rows(db: Session, user: User) -> None:
    """Remove rows that reference the user before the user row itself."""
    for log in db.query(WorkoutLog).filter(WorkoutLog.user_id == user.id).all():
        db.delete(log)
    for plan in db.query(WorkoutPlan).filter(WorkoutPlan.user_id == user.id).all():
        db.query(AssignedWorkout).filter(AssignedWorkout.workout_plan_id == plan.id).delete(
            synchronize_session=False
        )
        for log in db.query(WorkoutLog).filter(WorkoutLog.workout_plan_id == plan.id).all():
            db.delete(log)
        db.delete(plan)
    for participant in db.query(Participant).filter(Participant.user_id == user.id).all():
        db.delete(participant)
    db.flush()
    for post in db.query(Post).filter(Post.user_id == user.id).all():
        db.delete(post)
    for model in (Reaction, Comment, FavouriteExercise, UserExercisePB, StepLog, StepGoal, TrainingProgression):
        db.query(model).filter(model.user_id == user.id).delete(synchronize_session=False)
