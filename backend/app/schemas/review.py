from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field


class ReadStatus(str, Enum):
    WANT_TO_READ = "want-to-read"
    CURRENTLY_READING = "currently-reading"
    READ = "read"


class ReviewCreate(BaseModel):
    book_id: int
    rating: int = Field(..., ge=1, le=5)
    read_status: ReadStatus
    review_text: str | None = Field(None, max_length=2000)
    is_public: bool = True
    tags: list[str] = []
    start_date: date | None = None
    finish_date: date | None = None


class ReviewUser(BaseModel):
    id: int
    username: str
    display_name: str
    avatar: str

    class Config:
        from_attributes = True


class BookSummary(BaseModel):
    id: int
    title: str
    author: str
    cover_image: str
    average_rating: float

    class Config:
        from_attributes = True


class ReviewResponse(BaseModel):
    id: int
    user: ReviewUser | None  # None once the author's account is deleted
    book: BookSummary
    rating: int
    review_text: str
    read_status: ReadStatus
    start_date: date | None
    finish_date: date | None
    is_public: bool
    tags: list[str]
    likes: list[int]  # ids of users who liked the review
    likes_count: int
    created_at: datetime
    updated_at: datetime


class ReviewList(BaseModel):
    reviews: list[ReviewResponse]
    total: int
    page: int
    total_pages: int


class LikeResult(BaseModel):
    liked: bool
    likes_count: int


class MessageResponse(BaseModel):
    message: str
