from fastapi import APIRouter

from app.api import admin, auth, books, reviews, users

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(books.router, prefix="/books", tags=["books"])
router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
