from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.enums import Energy, Mood, ReactionType, SleepQuality
from ..database import Base
from .user import User


class Challenge(Base):
    __tablename__ = "challenges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, nullable=False
    )

    participants: Mapped[list["Participant"]] = relationship(
        back_populates="challenge", cascade="all, delete-orphan"
    )
    posts: Mapped[list["Post"]] = relationship(
        back_populates="challenge", cascade="all, delete-orphan"
    )


class Participant(Base):
    __tablename__ = "challenge_participants"
    __table_args__ = (UniqueConstraint("user_id", "challenge_id", name="participant_unique"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    challenge_id: Mapped[int] = mapped_column(
        ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False
    )
    is_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, nullable=False
    )
    completed_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_active_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    user: Mapped[User] = relationship(lazy="joined")
    challenge: Mapped[Challenge] = relationship(back_populates="participants", lazy="joined")
    posts: Mapped[list["Post"]] = relationship(
        back_populates="participant", cascade="all, delete-orphan", order_by="Post.date"
    )


class Post(Base):
    __tablename__ = "challenge_posts"
    __table_args__ = (
        UniqueConstraint("user_id", "challenge_id", "date", name="post_user_challenge_date_unique"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    challenge_id: Mapped[int] = mapped_column(
        ForeignKey("challenges.id", ondelete="CASCADE"), index=True, nullable=False
    )
    participant_id: Mapped[int] = mapped_column(
        ForeignKey("challenge_participants.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    sleep_hours: Mapped[Optional[float]] = mapped_column(Float)
    sleep_quality: Mapped[Optional[SleepQuality]] = mapped_column(
        Enum(SleepQuality, native_enum=False)
    )
    meal_tracking: Mapped[Optional[str]] = mapped_column(Text)
    day_description: Mapped[Optional[str]] = mapped_column(Text)
    mood: Mapped[Optional[Mood]] = mapped_column(Enum(Mood, native_enum=False))
    energy: Mapped[Optional[Energy]] = mapped_column(Enum(Energy, native_enum=False))
    achievements: Mapped[Optional[str]] = mapped_column(Text)
    challenges: Mapped[Optional[str]] = mapped_column(Text)
    photos: Mapped[list[str]] = mapped_column(default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, nullable=False
    )

    user: Mapped[User] = relationship(lazy="joined")
    challenge: Mapped[Challenge] = relationship(back_populates="posts")
    participant: Mapped[Participant] = relationship(back_populates="posts")
    reactions: Mapped[list["Reaction"]] = relationship(
        back_populates="post", cascade="all, delete-orphan"
    )
    comments: Mapped[list["Comment"]] = relationship(
        back_populates="post", cascade="all, delete-orphan", order_by="Comment.created_at"
    )


class Reaction(Base):
    __tablename__ = "challenge_reactions"
    __table_args__ = (UniqueConstraint("user_id", "post_id", name="reaction_user_post_unique"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    post_id: Mapped[int] = mapped_column(
        ForeignKey("challenge_posts.id", ondelete="CASCADE"), nullable=False
    )
    reaction_type: Mapped[ReactionType] = mapped_column(
        Enum(ReactionType, native_enum=False), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, nullable=False
    )

    post: Mapped[Post] = relationship(back_populates="reactions")


class Comment(Base):
    __tablename__ = "challenge_comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    post_id: Mapped[int] = mapped_column(
        ForeignKey("challenge_posts.id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    participant_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("challenge_participants.id", ondelete="SET NULL"), nullable=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, nullable=False
    )

    user: Mapped[User] = relationship(lazy="joined")
    post: Mapped[Post] = relationship(back_populates="comments")
