from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.database import LIKE_ESCAPE, commit_or_conflict, like_pattern
from app.core.exceptions import NotFound
from app.core.logging import get_logger
from app.models.book import Book
from app.models.review import Review
from app.schemas.book import BookCreate, BookDetailResponse, BookResponse, BookSearchResponse
from app.services.external_apis import (
    CatalogTimeoutError,
    CatalogUnavailableError,
    GoogleBooksClient,
)

logger = get_logger(__name__)

LOCAL_SEARCH_LIMIT = 10
DETAIL_REVIEW_LIMIT = 10


def search_local(db: Session, query: str, limit: int = LOCAL_SEARCH_LIMIT) -> list[Book]:
    """Case-insensitive match over title, author and description."""
    search_term = like_pattern(query)

    return (
        db.query(Book)
        .filter(
            or_(
                Book.title.ilike(search_term, escape=LIKE_ESCAPE),
                Book.author.ilike(search_term, escape=LIKE_ESCAPE),
                Book.description.ilike(search_term, escape=LIKE_ESCAPE),
            )
        )
        .order_by(Book.title)
        .limit(limit)
        .all()
    )


async def search_books(
    db: Session,
    catalog: GoogleBooksClient,
    query: str,
    start_index: int = 0,
    max_results: int = 20,
) -> BookSearchResponse:
    """
    Search the local store and the external catalog independently.

    A failure on either side still returns the other side's hits, with a
    message describing what was left out. Results are not deduplicated.
    """
    messages = []

    try:
        local_books = [BookResponse.model_validate(b) for b in search_local(db, query)]
    except SQLAlchemyError:
        logger.exception("Local book search failed")
        db.rollback()
        local_books = []
        messages.append("Local library is unavailable; showing catalog results only.")

    try:
        catalog_result = await catalog.search(
            query, start_index=start_index, max_results=max_results
        )
        external_books, total_external = catalog_result.books, catalog_result.total
    except CatalogTimeoutError:
        external_books, total_external = [], 0
        messages.append("Book catalog timed out; showing local results only.")
    except CatalogUnavailableError:
        external_books, total_external = [], 0
        messages.append("Book catalog is unavailable; showing local results only.")

    return BookSearchResponse(
        local_books=local_books,
        external_books=external_books,
        total_local=len(local_books),
        total_external=total_external,
        message=" ".join(messages) or None,
    )


def get_book_or_404(db: Session, book_id: int) -> Book:
    book = db.query(Book).filter(Book.id == book_id).first()
    if not book:
        raise NotFound("Book not found")
    return book


def get_book(db: Session, book_id: int) -> BookDetailResponse:
    """Book details with its most recent public reviews."""
    # Imported here, review_service depends on this module
    from app.services.review_service import to_review_response

    book = get_book_or_404(db, book_id)

    reviews = (
        db.query(Review)
        .filter(Review.book_id == book.id, Review.is_public)
        .order_by(Review.created_at.desc())
        .limit(DETAIL_REVIEW_LIMIT)
        .all()
    )

    return BookDetailResponse(
        book=BookResponse.model_validate(book),
        reviews=[to_review_response(r) for r in reviews],
    )


def find_existing(db: Session, book_data: BookCreate) -> Book | None:
    """Look a book up by google_books_id first, then by ISBN."""
    if book_data.google_books_id:
        book = db.query(Book).filter(Book.google_books_id == book_data.google_books_id).first()
        if book:
            return book
    if book_data.isbn:
        return db.query(Book).filter(Book.isbn == book_data.isbn).first()
    return None


def import_or_create(db: Session, book_data: BookCreate) -> tuple[Book, bool]:
    """
    Return the stored copy of a book, creating it when unknown.

    Returns:
        (book, created) where created is False when an existing book matched
    """
    existing = find_existing(db, book_data)
    if existing:
        return existing, False

    book = Book(**book_data.model_dump())
    db.add(book)
    commit_or_conflict(db)
    db.refresh(book)

    logger.info(
        f"Added book {book.title!r}",
        extra={"extra_fields": {"book_id": book.id, "google_books_id": book.google_books_id}},
    )
    return book, True


def recompute_rating(db: Session, book_id: int) -> None:
    """
    Refresh a book's derived rating fields from its reviews.

    Flushes but does not commit, so the caller's review write and this update
    land in the same transaction.
    """
    db.flush()

    average, count = (
        db.query(func.avg(Review.rating), func.count(Review.id))
        .filter(Review.book_id == book_id)
        .one()
    )

    book = db.get(Book, book_id)
    if book is None:
        return

    if count:
        book.average_rating = round(float(average), 1)
        book.ratings_count = count
    else:
        book.average_rating = 0.0
        book.ratings_count = 0


def trending_books(db: Session, limit: int = 20) -> list[Book]:
    """Most rated books first, ties broken by average rating."""
    return (
        db.query(Book)
        .order_by(Book.ratings_count.desc(), Book.average_rating.desc(), Book.id)
        .limit(limit)
        .all()
    )


def recent_books(db: Session, limit: int = 20) -> list[Book]:
    return db.query(Book).order_by(Book.created_at.desc(), Book.id.desc()).limit(limit).all()
