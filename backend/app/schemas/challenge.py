import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, Field

from ..core.enums import Energy, Mood, ReactionType, SleepQuality


class ChallengeBase(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    start_date: dt.date
    end_date: dt.date
    is_active: bool = False


class ChallengeCreate(ChallengeBase):
    pass


class ChallengeUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    is_active: Optional[bool] = None


class ChallengeRead(ChallengeBase):
    id: int
    created_by: Optional[int] = None
    created_at: dt.datetime

    model_config = {"from_attributes": True}


class ChallengeListItem(ChallengeRead):
    participant_count: int


class AccessRead(BaseModel):
    is_enabled: bool
    challenge_id: Optional[int] = None
    challenge_title: Optional[str] = None


class ChallengeStats(BaseModel):
    total_days: int
    days_passed: int
    days_remaining: int
    completed_days: int
    streak: int
    total_participants: int


class Author(BaseModel):
    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    image_url: Optional[str] = None
    display_name: str
    is_admin: bool = False


class PostFields(BaseModel):
    sleep_hours: Optional[float] = Field(default=None, ge=0, le=24)
    sleep_quality: Optional[SleepQuality] = None
    meal_tracking: Optional[str] = None
    day_description: Optional[str] = None
    mood: Optional[Mood] = None
    energy: Optional[Energy] = None
    achievements: Optional[str] = None
    challenges: Optional[str] = None
    photos: list[str] = Field(default_factory=list)


class PostCreate(PostFields):
    date: dt.date


class PostUpdate(PostFields):
    pass


class ReactionRead(BaseModel):
    id: int
    user_id: int
    reaction_type: ReactionType

    model_config = {"from_attributes": True}


class CommentRead(BaseModel):
    id: int
    post_id: int
    user_id: int
    content: str
    created_at: dt.datetime
    author: Author


class PostRead(PostFields):
    id: int
    user_id: int
    challenge_id: int
    participant_id: int
    date: dt.date
    created_at: dt.datetime

    model_config = {"from_attributes": True}


class PostWithAuthor(PostRead):
    author: Author
    reactions: list[ReactionRead] = Field(default_factory=list)


class FeedPost(PostWithAuthor):
    comments: list[CommentRead] = Field(default_factory=list)
    reaction_counts: dict[str, int] = Field(default_factory=dict)
    user_reaction: Optional[ReactionType] = None


class PostPage(BaseModel):
    posts: list[PostWithAuthor]
    total: int
    page: int
    limit: int
    total_pages: int


class FeedPage(BaseModel):
    posts: list[FeedPost]
    total: int
    page: int
    limit: int
    total_pages: int


class TodayPost(BaseModel):
    post: Optional[PostRead] = None


class CalendarDay(BaseModel):
    date: dt.date
    has_post: bool
    mood: Optional[Mood] = None
    energy: Optional[Energy] = None


class ReactionToggle(BaseModel):
    post_id: int
    type: ReactionType


class ReactionToggleResult(BaseModel):
    action: Literal["added", "removed", "updated"]
    reaction: Optional[ReactionRead] = None


class ReactionBody(BaseModel):
    reaction_type: ReactionType


class CommentCreate(BaseModel):
    post_id: int
    content: str


class ParticipantCreate(BaseModel):
    user_id: int
    challenge_id: int


class ParticipantToggle(BaseModel):
    is_enabled: bool


class ParticipantUser(BaseModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    image_url: Optional[str] = None

    model_config = {"from_attributes": True}


class ParticipantRead(BaseModel):
    id: int
    user_id: int
    challenge_id: int
    is_enabled: bool
    joined_at: dt.datetime
    completed_days: int
    last_active_date: Optional[dt.datetime] = None
    user: ParticipantUser

    model_config = {"from_attributes": True}


class PostSummary(BaseModel):
    id: int
    date: dt.date
    sleep_hours: Optional[float] = None
    sleep_quality: Optional[SleepQuality] = None
    mood: Optional[Mood] = None
    energy: Optional[Energy] = None

    model_config = {"from_attributes": True}


class ParticipantDetail(ParticipantRead):
    posts: list[PostSummary] = Field(default_factory=list)


class ChallengeDetail(ChallengeRead):
    participants: list[ParticipantDetail]


class ParticipantPost(PostRead):
    reaction_count: int


class ParticipantPostPage(BaseModel):
    posts: list[ParticipantPost]
    total: int
    page: int
    limit: int
    total_pages: int


class ParticipantStats(BaseModel):
    total_days: int
    days_passed: int
    completed_days: int
    streak: int
    completion_rate: float
    last_post_date: Optional[dt.date] = None
