from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class ProgressionCreate(BaseModel):
    user_id: int
    training_type: str = Field(min_length=1)
    target_weeks: int = Field(default=4, ge=1)
    start_date: Optional[date] = None
    notes: Optional[str] = None


class ProgressionUpdate(BaseModel):
    training_type: Optional[str] = None
    target_weeks: Optional[int] = Field(default=None, ge=1)
    end_date: Optional[date] = None
    is_active: Optional[bool] = None
    is_completed: Optional[bool] = None
    notes: Optional[str] = None


class ProgressionRead(BaseModel):
    id: int
    user_id: int
    training_type: str
    target_weeks: int
    actual_weeks: Optional[int] = None
    start_date: date
    end_date: Optional[date] = None
    is_active: bool
    is_completed: bool
    assigned_by: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProgressionList(BaseModel):
    progressions: list[ProgressionRead]
    total: int
