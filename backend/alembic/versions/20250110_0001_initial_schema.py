"""initial schema: accounts, exercises, workouts

Revision ID: 20250110_0001
Revises: 
Create Date: 2025-01-10 00:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20250110_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("username", sa.String(length=100), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="USER"),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("height", sa.Float(), nullable=True),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column("membership_start_date", sa.Date(), nullable=True),
        sa.Column("membership_end_date", sa.Date(), nullable=True),
        sa.Column("membership_duration", sa.Integer(), nullable=True),
        sa.Column("membership_status", sa.String(length=20), nullable=False, server_default="INACTIVE"),
        sa.Column("membership_set_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("membership_notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    )
    op.create_index("ix_users_id", "users", ["id"], unique=False)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "invitations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="USER"),
        sa.Column("invited_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="PENDING"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()")),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_invitations_email", "invitations", ["email"])

    op.create_table(
        "admin_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("require_approval", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("auto_assign_workouts", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("email_notifications", sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "exercises",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("aliases", sa.JSON(), nullable=False),
        sa.Column("primary_muscles", sa.JSON(), nullable=False),
        sa.Column("secondary_muscles", sa.JSON(), nullable=False),
        sa.Column("force", sa.String(length=50), nullable=True),
        sa.Column("level", sa.String(length=50), nullable=False),
        sa.Column("mechanic", sa.String(length=50), nullable=True),
        sa.Column("equipment", sa.String(length=100), nullable=True),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("instructions", sa.JSON(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tips", sa.JSON(), nullable=False),
        sa.Column("image", sa.Text(), nullable=True),
    )
    op.create_index("ix_exercises_name", "exercises", ["name"], unique=True)
    op.create_index("ix_exercises_category", "exercises", ["category"])

    op.create_table(
        "favourite_exercises",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("exercise_id", sa.Integer(), sa.ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()")),
        sa.UniqueConstraint("user_id", "exercise_id", name="favourite_exercise_unique"),
    )

    op.create_table(
        "workout_plans",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=True),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_system_routine", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("system_routine_category", sa.String(length=80), nullable=True),
        sa.Column("training_type", sa.String(length=80), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    )
    op.create_index("ix_workout_plans_user_id", "workout_plans", ["user_id"])

    op.create_table(
        "workout_plan_exercises",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("workout_plan_id", sa.Integer(), sa.ForeignKey("workout_plans.id", ondelete="CASCADE"), nullable=False),
        sa.Column("exercise_id", sa.Integer(), sa.ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False),
        sa.Column("sets", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("tracking_type", sa.String(length=10), nullable=False, server_default="REPS"),
        sa.Column("reps", sa.Integer(), nullable=True),
        sa.Column("exercise_duration", sa.Integer(), nullable=True),
        sa.Column("order", sa.Integer(), nullable=True),
    )

    op.create_table(
        "assigned_workouts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("workout_plan_id", sa.Integer(), sa.ForeignKey("workout_plans.id", ondelete="CASCADE"), nullable=False),
        sa.Column("assigned_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("assigned_at", sa.Date(), server_default=sa.text("CURRENT_DATE"), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="PENDING"),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_assigned_workouts_user_id", "assigned_workouts", ["user_id"])

    op.create_table(
        "workout_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("workout_plan_id", sa.Integer(), sa.ForeignKey("workout_plans.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), server_default=sa.text("CURRENT_DATE"), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_rest_time_seconds", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_active_time_seconds", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("in_progress", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_workout_logs_user_id", "workout_logs", ["user_id"])

    op.create_table(
        "workout_log_exercises",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("workout_log_id", sa.Integer(), sa.ForeignKey("workout_logs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("exercise_id", sa.Integer(), sa.ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tracking_type", sa.String(length=10), nullable=False, server_default="REPS"),
    )

    op.create_table(
        "set_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "workout_log_exercise_id",
            sa.Integer(),
            sa.ForeignKey("workout_log_exercises.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column("reps", sa.Integer(), nullable=True),
        sa.Column("exercise_duration", sa.Integer(), nullable=True),
        sa.Column("order", sa.Integer(), nullable=True),
    )

    op.create_table(
        "user_exercise_pbs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("exercise_id", sa.Integer(), sa.ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False),
        sa.Column("weight", sa.Float(), nullable=False),
        sa.Column("reps", sa.Integer(), nullable=True),
        sa.Column("exercise_duration", sa.Integer(), nullable=True),
        sa.Column("workout_log_id", sa.Integer(), sa.ForeignKey("workout_logs.id", ondelete="SET NULL"), nullable=True),
        sa.UniqueConstraint("user_id", "exercise_id", name="user_exercise_pb_unique"),
    )


def downgrade() -> None:
    op.drop_table("user_exercise_pbs")
    op.drop_table("set_logs")
    op.drop_table("workout_log_exercises")
    op.drop_index("ix_workout_logs_user_id", table_name="workout_logs")
    op.drop_table("workout_logs")
    op.drop_index("ix_assigned_workouts_user_id", table_name="assigned_workouts")
    op.drop_table("assigned_workouts")
    op.drop_table("workout_plan_exercises")
    op.drop_index("ix_workout_plans_user_id", table_name="workout_plans")
    op.drop_table("workout_plans")
    op.drop_table("favourite_exercises")
    op.drop_index("ix_exercises_category", table_name="exercises")
    op.drop_index("ix_exercises_name", table_name="exercises")
    op.drop_table("exercises")
    op.drop_table("admin_settings")
    op.drop_index("ix_invitations_email", table_name="invitations")
    op.drop_table("invitations")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
