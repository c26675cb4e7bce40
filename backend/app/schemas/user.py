from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.review import ReviewResponse


class PublicProfile(BaseModel):
    id: int
    username: str
    display_name: str
    bio: str
    avatar: str
    favorite_genres: list[str]
    reading_goal: int
    is_public: bool
    followers: list[int]  # user ids
    following: list[int]  # user ids
    join_date: datetime


class AdminProfile(PublicProfile):
    email: str
    is_admin: bool
    created_at: datetime
    updated_at: datetime


class ProfileUpdate(BaseModel):
    """Self-service profile fields; anything else in the body is ignored."""

    display_name: str | None = Field(None, min_length=1, max_length=50)
    bio: str | None = Field(None, max_length=500)
    reading_goal: int | None = Field(None, ge=1, le=1000)
    is_public: bool | None = None
    favorite_genres: list[str] | None = None


class ReadingStats(BaseModel):
    read: int = 0
    currently_reading: int = 0
    want_to_read: int = 0
    total_books: int = 0


class UserProfileResponse(BaseModel):
    user: PublicProfile
    stats: ReadingStats
    recent_reviews: list[ReviewResponse]


class UserSummary(BaseModel):
    id: int
    username: str
    display_name: str
    avatar: str
    bio: str

    class Config:
        from_attributes = True


class UserList(BaseModel):
    users: list[UserSummary]
    total: int
    page: int
    total_pages: int


class FollowResult(BaseModel):
    following: bool
    followers_count: int
    following_count: int
