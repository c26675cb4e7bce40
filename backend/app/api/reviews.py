from typing import Literal

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.user import User
from app.schemas.review import (
    LikeResult,
    MessageResponse,
    ReadStatus,
    ReviewCreate,
    ReviewList,
    ReviewResponse,
)
from app.services import auth_service, review_service

router = APIRouter()


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def upsert_review(
    review_data: ReviewCreate,
    response: Response,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    """Create or update the caller's review of a book."""
    review, created = review_service.upsert_review(db, current_user, review_data)
    if not created:
        response.status_code = status.HTTP_200_OK
    return review_service.to_review_response(review)


@router.get("/feed/following", response_model=ReviewList)
async def following_feed(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    """Public reviews from followed users, newest first."""
    return review_service.following_feed(db, current_user, page=page, limit=limit)


@router.get("/user/{user_id}", response_model=ReviewList)
async def list_user_reviews(
    user_id: int,
    status_filter: ReadStatus | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    sort: Literal["updated_at", "created_at", "rating"] = Query("updated_at"),
    current_user: User | None = Depends(auth_service.get_current_user_optional),
    db: Session = Depends(get_db),
):
    """A user's reviews. Private ones are only listed for their owner."""
    return review_service.list_user_reviews(
        db,
        user_id,
        current_user,
        status=status_filter.value if status_filter else None,
        page=page,
        limit=limit,
        sort=sort,
    )


@router.get("/book/{book_id}", response_model=ReviewList)
async def list_book_reviews(
    book_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
):
    return review_service.list_book_reviews(db, book_id, page=page, limit=limit)


@router.post("/{review_id}/like", response_model=LikeResult)
async def toggle_like(
    review_id: int,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    return review_service.toggle_like(db, current_user, review_id)


@router.delete("/{review_id}", response_model=MessageResponse)
async def delete_review(
    review_id: int,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    review_service.delete_review(db, current_user, review_id)
    return {"message": "Review deleted"}
