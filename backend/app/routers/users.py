from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_current_user
from ..models.user import User
from ..models.workout import AssignedWorkout
from ..schemas.user import RoleRead
from ..schemas.workout import AssignmentRead, UserAssignmentStatusUpdate

router = APIRouter(prefix="/user", tags=["user"])


@router.get("/role", response_model=RoleRead)
def read_role(current_user: User = Depends(get_current_user)) -> RoleRead:
    return RoleRead(role=current_user.role)


@router.get("/assigned-workouts", response_model=list[AssignmentRead])
def list_my_assignments(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[AssignedWorkout]:
    return (
        db.query(AssignedWorkout)
        .filter(AssignedWorkout.user_id == current_user.id)
        .order_by(AssignedWorkout.assigned_at.desc(), AssignedWorkout.id.desc())
        .all()
    )


@router.patch("/assigned-workouts", response_model=AssignmentRead)
def update_my_assignment(
    payload: UserAssignmentStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AssignedWorkout:
    assignment = db.get(AssignedWorkout, payload.assignment_id)
    if not assignment or assignment.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assignment not found")
    assignment.status = payload.status
    db.commit()
    db.refresh(assignment)
    return assignment
