"""Reading records: upsert, listings, the following feed and likes."""

import math

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.database import commit_or_conflict
from app.core.exceptions import Forbidden, NotFound
from app.core.logging import get_logger
from app.models.review import Review
from app.models.user import User, follows
from app.schemas.review import (
    BookSummary,
    LikeResult,
    ReviewCreate,
    ReviewList,
    ReviewResponse,
    ReviewUser,
)
from app.services import book_service

logger = get_logger(__name__)

SORT_COLUMNS = {
    "updated_at": Review.updated_at,
    "created_at": Review.created_at,
    "rating": Review.rating,
}


def to_review_response(review: Review) -> ReviewResponse:
    return ReviewResponse(
        id=review.id,
        user=ReviewUser.model_validate(review.user) if review.user else None,
        book=BookSummary.model_validate(review.book),
        rating=review.rating,
        review_text=review.review_text or "",
        read_status=review.read_status,
        start_date=review.start_date,
        finish_date=review.finish_date,
        is_public=review.is_public,
        tags=list(review.tags or []),
        likes=[u.id for u in review.liked_by],
        likes_count=review.likes_count,
        created_at=review.created_at,
        updated_at=review.updated_at,
    )


def _get_review_or_404(db: Session, review_id: int) -> Review:
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review:
        raise NotFound("Review not found")
    return review


def upsert_review(db: Session, user: User, review_data: ReviewCreate) -> tuple[Review, bool]:
    """
    Create the user's review of a book, or update it in place.

    Start and finish dates are only overwritten when supplied. The book's
    rating is recomputed in the same transaction.

    Returns:
        (review, created)
    """
    book = book_service.get_book_or_404(db, review_data.book_id)

    review = (
        db.query(Review)
        .filter(Review.user_id == user.id, Review.book_id == book.id)
        .first()
    )
    created = review is None
    if created:
        review = Review(user_id=user.id, book_id=book.id)
        db.add(review)

    review.rating = review_data.rating
    review.read_status = review_data.read_status.value
    review.review_text = review_data.review_text or ""
    review.is_public = review_data.is_public
    review.tags = list(review_data.tags)
    if review_data.start_date is not None:
        review.start_date = review_data.start_date
    if review_data.finish_date is not None:
        review.finish_date = review_data.finish_date

    book_service.recompute_rating(db, book.id)
    commit_or_conflict(db)
    db.refresh(review)

    logger.info(
        f"{'Created' if created else 'Updated'} review {review.id}",
        extra={"extra_fields": {"book_id": book.id, "rating": review.rating}},
    )
    return review, created


def _page(query, page: int, limit: int) -> ReviewList:
    total = query.count()
    reviews = query.offset((page - 1) * limit).limit(limit).all()
    return ReviewList(
        reviews=[to_review_response(r) for r in reviews],
        total=total,
        page=page,
        total_pages=math.ceil(total / limit),
    )


def list_user_reviews(
    db: Session,
    user_id: int,
    requester: User | None,
    status: str | None = None,
    page: int = 1,
    limit: int = 20,
    sort: str = "updated_at",
) -> ReviewList:
    """A user's reviews. Only the owner sees private ones."""
    query = db.query(Review).filter(Review.user_id == user_id)

    if requester is None or requester.id != user_id:
        query = query.filter(Review.is_public)

    if status:
        query = query.filter(Review.read_status == status)

    column = SORT_COLUMNS.get(sort, Review.updated_at)
    query = query.order_by(column.desc(), Review.id.desc())

    return _page(query, page, limit)


def list_book_reviews(db: Session, book_id: int, page: int = 1, limit: int = 10) -> ReviewList:
    """Public reviews of a book that carry text, newest first."""
    book_service.get_book_or_404(db, book_id)

    query = (
        db.query(Review)
        .filter(
            Review.book_id == book_id,
            Review.is_public,
            Review.review_text.is_not(None),
            Review.review_text != "",
        )
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return _page(query, page, limit)


def following_feed(db: Session, user: User, page: int = 1, limit: int = 20) -> ReviewList:
    """Public reviews written by users the requester follows."""
    followed_ids = select(follows.c.followed_id).where(follows.c.follower_id == user.id)

    query = (
        db.query(Review)
        .filter(Review.user_id.in_(followed_ids), Review.is_public)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return _page(query, page, limit)


def toggle_like(db: Session, user: User, review_id: int) -> LikeResult:
    review = _get_review_or_404(db, review_id)

    liked = user in review.liked_by
    if liked:
        review.liked_by.remove(user)
    else:
        review.liked_by.append(user)

    commit_or_conflict(db)
    db.refresh(review)

    return LikeResult(liked=not liked, likes_count=review.likes_count)


def delete_review(db: Session, user: User, review_id: int) -> None:
    """Delete the requester's own review and refresh the book's rating."""
    review = _get_review_or_404(db, review_id)

    if review.user_id != user.id:
        raise Forbidden("Not authorized to delete this review")

    book_id = review.book_id
    db.delete(review)
    book_service.recompute_rating(db, book_id)
    commit_or_conflict(db)

    logger.info(f"Deleted review {review_id}", extra={"extra_fields": {"book_id": book_id}})
