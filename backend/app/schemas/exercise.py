from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ExerciseBase(BaseModel):
    name: str = Field(min_length=1)
    aliases: list[str] = Field(default_factory=list)
    primary_muscles: list[str] = Field(default_factory=list)
    secondary_muscles: list[str] = Field(default_factory=list)
    force: Optional[str] = None
    level: str = Field(min_length=1)
    mechanic: Optional[str] = None
    equipment: Optional[str] = None
    category: str = Field(min_length=1)
    instructions: list[str] = Field(default_factory=list)
    description: Optional[str] = None
    tips: list[str] = Field(default_factory=list)
    image: Optional[str] = None


class ExerciseCreate(ExerciseBase):
    @field_validator("name", "level", "category")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("aliases", "primary_muscles", "secondary_muscles", "instructions", "tips")
    @classmethod
    def _drop_blank_entries(cls, values: list[str]) -> list[str]:
        return [value.strip() for value in values if value and value.strip()]


class ExerciseRead(ExerciseBase):
    id: int

    model_config = {"from_attributes": True}


class ExercisePage(BaseModel):
    exercises: list[ExerciseRead]
    total: int
    page: int
    limit: int
    total_pages: int


class FavouriteRead(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class FavouriteToggle(BaseModel):
    exercise_id: int
    is_favourite: bool


class StoredImageRead(BaseModel):
    index: int
    filename: str
    path: str
    size: int


class ImageUploadResult(BaseModel):
    exercise_name: str
    images: list[StoredImageRead]
    total_uploaded: int
