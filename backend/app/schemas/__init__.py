from app.schemas.admin import AdminStats, AdminUserList, AdminUserUpdate, PasswordReset
from app.schemas.auth import AuthResponse, LoginRequest, UserCreate
from app.schemas.book import BookCreate, BookDetailResponse, BookResponse, BookSearchResponse, CatalogBook
from app.schemas.review import LikeResult, ReadStatus, ReviewCreate, ReviewList, ReviewResponse
from app.schemas.user import AdminProfile, ProfileUpdate, PublicProfile, UserProfileResponse

__all__ = [
    "UserCreate",
    "LoginRequest",
    "AuthResponse",
    "PublicProfile",
    "AdminProfile",
    "ProfileUpdate",
    "UserProfileResponse",
    "BookCreate",
    "BookResponse",
    "BookDetailResponse",
    "BookSearchResponse",
    "CatalogBook",
    "ReadStatus",
    "ReviewCreate",
    "ReviewResponse",
    "ReviewList",
    "LikeResult",
    "AdminUserUpdate",
    "AdminUserList",
    "AdminStats",
    "PasswordReset",
]
