from datetime import date, datetime

from sqlalchemy import JSON, Date, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class Book(Base):
    """A book known to the local catalog, imported from Google Books or added by hand."""

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Core identifiers
    title: Mapped[str] = mapped_column(String(500), index=True)
    author: Mapped[str] = mapped_column(String(255), index=True)

    # External IDs; NULL when absent so uniqueness only applies to real values
    isbn: Mapped[str | None] = mapped_column(String(20), unique=True, index=True)
    google_books_id: Mapped[str | None] = mapped_column(String(50), unique=True, index=True)

    # Metadata
    description: Mapped[str | None] = mapped_column(Text)
    published_date: Mapped[date | None] = mapped_column(Date)
    page_count: Mapped[int | None] = mapped_column(Integer)
    genres: Mapped[list[str]] = mapped_column(JSON, default=list)
    cover_image: Mapped[str] = mapped_column(String(500), default="")
    language: Mapped[str] = mapped_column(String(10), default="en")
    publisher: Mapped[str | None] = mapped_column(String(255))

    # Derived from reviews, see book_service.recompute_rating
    average_rating: Mapped[float] = mapped_column(Float, default=0.0)
    ratings_count: Mapped[int] = mapped_column(Integer, default=0, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    reviews: Mapped[list["Review"]] = relationship(back_populates="book", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Book id={self.id} title={self.title!r}>"


# Forward reference
from app.models.review import Review  # noqa: E402
