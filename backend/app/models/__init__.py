from app.models.book import Book
from app.models.review import Review, review_likes
from app.models.user import User, follows

__all__ = [
    "User",
    "Book",
    "Review",
    "follows",
    "review_likes",
]
