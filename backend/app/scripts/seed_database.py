"""
Database seeding script.

Populates an empty books table with the starter catalog.

Run with: python -m app.scripts.seed_database
"""

from sqlalchemy.orm import Session

from app.core.database import Base, SessionLocal, engine
from app.core.logging import get_logger
from app.data.sample_books import SAMPLE_BOOKS
from app.models.book import Book
from app.schemas.book import BookCreate

logger = get_logger(__name__)


def seed_books(db: Session) -> int:
    """
    Insert starter books that are not stored yet.

    Returns:
        Number of books added
    """
    added = 0

    for book_data in SAMPLE_BOOKS:
        book = BookCreate(**book_data)

        if book.isbn and db.query(Book).filter(Book.isbn == book.isbn).first():
            continue

        db.add(Book(**book.model_dump()))
        added += 1

    db.commit()
    return added


def seed_if_empty(db: Session) -> int:
    """Seed only when the catalog has no books at all."""
    if db.query(Book).count() > 0:
        return 0

    added = seed_books(db)
    logger.info(f"Seeded {added} starter books")
    return added


def main():
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        added = seed_books(db)
        print(f"Added {added} books. Total: {db.query(Book).count()}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
