from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from ..core.enums import InviteStatus, MembershipStatus, UserRole


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    sub: Optional[str] = None
    role: Optional[UserRole] = None


class UserBase(BaseModel):
    email: EmailStr
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None


class UserCreate(UserBase):
    password: str = Field(min_length=8)


class UserRead(UserBase):
    id: int
    role: UserRole
    image_url: Optional[str] = None
    age: Optional[int] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    id: int
    email: EmailStr
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    image_url: Optional[str] = None
    display_name: str

    model_config = {"from_attributes": True}


class AdminUserRow(UserRead):
    assigned_workout_count: int = 0


class AdminUserList(BaseModel):
    users: list[AdminUserRow]
    total: int
    page: int
    limit: int
    total_pages: int


class AdminUserUpdate(BaseModel):
    role: Optional[UserRole] = None
    age: Optional[int] = Field(default=None, ge=0)
    height: Optional[float] = Field(default=None, ge=0)
    weight: Optional[float] = Field(default=None, ge=0)


class RoleRead(BaseModel):
    role: UserRole


class AdminCheck(BaseModel):
    is_admin: bool
    user_id: Optional[int] = None
    role: Optional[UserRole] = None


class AdminSetupRequest(BaseModel):
    user_id: int


class AdminAddRequest(BaseModel):
    email: EmailStr


class AdminAddResult(BaseModel):
    user: Optional[UserRead] = None
    invitation: Optional["InvitationRead"] = None


class InvitationCreate(BaseModel):
    email: EmailStr
    role: UserRole = UserRole.USER


class InvitationRead(BaseModel):
    id: int
    email: EmailStr
    role: UserRole
    status: InviteStatus
    invited_by: Optional[int] = None
    created_at: datetime
    accepted_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AdminSettingsRead(BaseModel):
    require_approval: bool
    auto_assign_workouts: bool
    email_notifications: bool

    model_config = {"from_attributes": True}


class AdminSettingsUpdate(BaseModel):
    require_approval: Optional[bool] = None
    auto_assign_workouts: Optional[bool] = None
    email_notifications: Optional[bool] = None


class MembershipRead(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    duration: Optional[int] = None
    status: MembershipStatus
    notes: Optional[str] = None
    set_by: Optional[int] = None
    days_remaining: int
    is_expired: bool
    is_active: bool
    has_valid_membership: bool


class MembershipUpdate(BaseModel):
    start_date: date
    duration: int = Field(gt=0)
    status: Optional[MembershipStatus] = None
    notes: Optional[str] = None


class SuccessResponse(BaseModel):
    success: Literal[True] = True


AdminAddResult.model_rebuild()
