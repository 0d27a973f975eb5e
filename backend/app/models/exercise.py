from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database import Base


class Exercise(Base):
    __tablename__ = "exercises"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), unique=True, index=True, nullable=False)
    aliases: Mapped[list[str]] = mapped_column(default=list)
    primary_muscles: Mapped[list[str]] = mapped_column(default=list)
    secondary_muscles: Mapped[list[str]] = mapped_column(default=list)
    force: Mapped[Optional[str]] = mapped_column(String(50))
    level: Mapped[str] = mapped_column(String(50), nullable=False)
    mechanic: Mapped[Optional[str]] = mapped_column(String(50))
    equipment: Mapped[Optional[str]] = mapped_column(String(100))
    category: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    instructions: Mapped[list[str]] = mapped_column(default=list)
    description: Mapped[Optional[str]] = mapped_column(Text)
    tips: Mapped[list[str]] = mapped_column(default=list)
    image: Mapped[Optional[str]] = mapped_column(Text)

    favourited_by: Mapped[list["FavouriteExercise"]] = relationship(
        back_populates="exercise", cascade="all, delete-orphan"
    )


class FavouriteExercise(Base):
    __tablename__ = "favourite_exercises"
    __table_args__ = (UniqueConstraint("user_id", "exercise_id", name="favourite_exercise_unique"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    exercise_id: Mapped[int] = mapped_column(
        ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    exercise: Mapped[Exercise] = relationship(back_populates="favourited_by")
