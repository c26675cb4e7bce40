import re
from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from app.schemas.review import ReviewResponse

_PARTIAL_DATE = re.compile(r"^(\d{4})(?:-(\d{1,2}))?(?:-(\d{1,2}))?")


def parse_published_date(value: str | None) -> date | None:
    """Parse catalog dates, which may be just a year ("2004") or year-month ("2004-05")."""
    if not value:
        return None
    match = _PARTIAL_DATE.match(value.strip())
    if not match:
        return None
    year, month, day = match.groups()
    try:
        return date(int(year), int(month or 1), int(day or 1))
    except ValueError:
        return None


TITLE_MAX_LENGTH = 500
AUTHOR_MAX_LENGTH = 255


class BookBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    author: str = Field(..., min_length=1, max_length=AUTHOR_MAX_LENGTH)
    isbn: str | None = Field(None, max_length=20)
    google_books_id: str | None = Field(None, max_length=50)
    description: str | None = None
    published_date: date | None = None
    page_count: int | None = Field(None, ge=0)
    genres: list[str] = []
    cover_image: str = ""
    language: str = "en"
    publisher: str | None = None

    @field_validator("title", "author")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("isbn", "google_books_id")
    @classmethod
    def blank_identifier_to_none(cls, v: str | None) -> str | None:
        # Stored as NULL so absent identifiers never collide
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("published_date", mode="before")
    @classmethod
    def parse_partial_date(cls, v):
        if isinstance(v, str):
            return parse_published_date(v)
        return v


class BookCreate(BookBase):
    """Fields accepted when importing or adding a book. Rating fields are derived."""


class CatalogBook(BookBase):
    """A search hit from the external catalog, shaped like a local book."""


class BookResponse(BookBase):
    id: int
    average_rating: float
    ratings_count: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BookSearchResponse(BaseModel):
    local_books: list[BookResponse]
    external_books: list[CatalogBook]
    total_local: int
    total_external: int
    message: str | None = None


class BookDetailResponse(BaseModel):
    book: BookResponse
    reviews: list[ReviewResponse]
