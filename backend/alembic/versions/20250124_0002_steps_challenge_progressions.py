"""step goals, 90-day challenge and training progressions

Revision ID: 20250124_0002
Revises: 20250110_0001
Create Date: 2025-01-24 00:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20250124_0002"
down_revision: Union[str, None] = "20250110_0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "step_goals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("assigned_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("daily_target", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), server_default=sa.text("CURRENT_DATE"), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    )
    op.create_index("ix_step_goals_user_id", "step_goals", ["user_id"])

    op.create_table(
        "step_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("step_goal_id", sa.Integer(), sa.ForeignKey("step_goals.id", ondelete="SET NULL"), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("actual_steps", sa.Integer(), nullable=False),
        sa.Column("target_steps", sa.Integer(), nullable=False),
        sa.Column("carry_over_steps", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("excess_steps", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.UniqueConstraint("user_id", "date", name="step_log_user_date_unique"),
    )
    op.create_index("ix_step_logs_user_id", "step_logs", ["user_id"])

    op.create_table(
        "challenges",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    )

    op.create_table(
        "challenge_participants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("challenge_id", sa.Integer(), sa.ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False),
        sa.Column("is_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("completed_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_active_date", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "challenge_id", name="participant_unique"),
    )
    op.create_index("ix_challenge_participants_user_id", "challenge_participants", ["user_id"])

    op.create_table(
        "challenge_posts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("challenge_id", sa.Integer(), sa.ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "participant_id",
            sa.Integer(),
            sa.ForeignKey("challenge_participants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("sleep_hours", sa.Float(), nullable=True),
        sa.Column("sleep_quality", sa.String(length=20), nullable=True),
        sa.Column("meal_tracking", sa.Text(), nullable=True),
        sa.Column("day_description", sa.Text(), nullable=True),
        sa.Column("mood", sa.String(length=20), nullable=True),
        sa.Column("energy", sa.String(length=20), nullable=True),
        sa.Column("achievements", sa.Text(), nullable=True),
        sa.Column("challenges", sa.Text(), nullable=True),
        sa.Column("photos", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.UniqueConstraint("user_id", "challenge_id", "date", name="post_user_challenge_date_unique"),
    )
    op.create_index("ix_challenge_posts_user_id", "challenge_posts", ["user_id"])
    op.create_index("ix_challenge_posts_challenge_id", "challenge_posts", ["challenge_id"])

    op.create_table(
        "challenge_reactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("post_id", sa.Integer(), sa.ForeignKey("challenge_posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("reaction_type", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.UniqueConstraint("user_id", "post_id", name="reaction_user_post_unique"),
    )

    op.create_table(
        "challenge_comments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("post_id", sa.Integer(), sa.ForeignKey("challenge_posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "participant_id",
            sa.Integer(),
            sa.ForeignKey("challenge_participants.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    )
    op.create_index("ix_challenge_comments_post_id", "challenge_comments", ["post_id"])

    op.create_table(
        "training_progressions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("training_type", sa.String(length=80), nullable=False),
        sa.Column("target_weeks", sa.Integer(), nullable=False, server_default="4"),
        sa.Column("actual_weeks", sa.Integer(), nullable=True),
        sa.Column("start_date", sa.Date(), server_default=sa.text("CURRENT_DATE"), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("assigned_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    )
    op.create_index("ix_training_progressions_user_id", "training_progressions", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_training_progressions_user_id", table_name="training_progressions")
    op.drop_table("training_progressions")
    op.drop_index("ix_challenge_comments_post_id", table_name="challenge_comments")
    op.drop_table("challenge_comments")
    op.drop_table("challenge_reactions")
    op.drop_index("ix_challenge_posts_challenge_id", table_name="challenge_posts")
    op.drop_index("ix_challenge_posts_user_id", table_name="challenge_posts")
    op.drop_table("challenge_posts")
    op.drop_index("ix_challenge_participants_user_id", table_name="challenge_participants")
    op.drop_table("challenge_participants")
    op.drop_table("challenges")
    op.drop_index("ix_step_logs_user_id", table_name="step_logs")
    op.drop_table("step_logs")
    op.drop_index("ix_step_goals_user_id", table_name="step_goals")
    op.drop_table("step_goals")
