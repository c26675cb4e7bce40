from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.exceptions import ValidationFailed
from app.models.user import User
from app.schemas.book import BookCreate, BookDetailResponse, BookResponse, BookSearchResponse
from app.services import auth_service, book_service
from app.services.external_apis import GoogleBooksClient, get_catalog_client

router = APIRouter()


@router.get("/search", response_model=BookSearchResponse)
async def search_books(
    q: str = Query(..., min_length=1, max_length=100, description="Search query"),
    start_index: int = Query(0, ge=0),
    max_results: int = Query(20, ge=1, le=40),
    db: Session = Depends(get_db),
    catalog: GoogleBooksClient = Depends(get_catalog_client),
):
    """Search local books and the external catalog."""
    query = q.strip()
    if not query:
        raise ValidationFailed.for_field("q", "Search query must not be blank")

    return await book_service.search_books(
        db, catalog, query, start_index=start_index, max_results=max_results
    )


@router.get("/trending", response_model=list[BookResponse])
@router.get("/trending/popular", response_model=list[BookResponse], include_in_schema=False)
async def trending_books(
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Most reviewed books first."""
    return book_service.trending_books(db, limit=limit)


@router.get("/recent", response_model=list[BookResponse])
@router.get("/recent/added", response_model=list[BookResponse], include_in_schema=False)
async def recent_books(
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Most recently added books first."""
    return book_service.recent_books(db, limit=limit)


@router.get("/{book_id}", response_model=BookDetailResponse)
async def get_book(
    book_id: int,
    db: Session = Depends(get_db),
):
    """Get book details with recent public reviews."""
    return book_service.get_book(db, book_id)


@router.post("", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def import_book(
    book_data: BookCreate,
    response: Response,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    """
    Import a catalog book or add one by hand.

    Matches existing books by google_books_id, then ISBN, and returns the
    stored copy with 200 instead of creating a duplicate.
    """
    book, created = book_service.import_or_create(db, book_data)
    if not created:
        response.status_code = status.HTTP_200_OK
    return book
