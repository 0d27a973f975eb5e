from datetime import date, datetime
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database import Base


class StepGoal(Base):
    __tablename__ = "step_goals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    assigned_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    daily_target: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, default=date.today, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(Date)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, nullable=False
    )

    step_logs: Mapped[list["StepLog"]] = relationship(
        back_populates="step_goal", order_by="StepLog.date.desc()"
    )

    def is_expired(self, today: date) -> bool:
        return self.end_date is not None and today > self.end_date


class StepLog(Base):
    __tablename__ = "step_logs"
    __table_args__ = (UniqueConstraint("user_id", "date", name="step_log_user_date_unique"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    step_goal_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("step_goals.id", ondelete="SET NULL"), nullable=True
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    actual_steps: Mapped[int] = mapped_column(Integer, nullable=False)
    target_steps: Mapped[int] = mapped_column(Integer, nullable=False)
    carry_over_steps: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    excess_steps: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    step_goal: Mapped[Optional[StepGoal]] = relationship(back_populates="step_logs")
