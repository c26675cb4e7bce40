from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.user import User
from app.schemas.auth import AuthResponse, LoginRequest, UserCreate
from app.schemas.user import ProfileUpdate, PublicProfile
from app.services import auth_service, user_service

router = APIRouter()


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        access_token=auth_service.issue_token(user),
        user=user_service.to_public_profile(user),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new user and sign them in."""
    user = user_service.register(db, user_data)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
async def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate by username or email and return a bearer token."""
    user = user_service.login(db, credentials.login, credentials.password)
    return _auth_response(user)


@router.get("/me", response_model=PublicProfile)
async def get_current_user_info(
    current_user: User = Depends(auth_service.get_current_user),
):
    """Get current authenticated user info."""
    return user_service.to_public_profile(current_user)


@router.put("/profile", response_model=PublicProfile)
async def update_profile(
    updates: ProfileUpdate,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    """Update the caller's own profile. Unknown fields are ignored."""
    user = user_service.update_profile(db, current_user, updates)
    return user_service.to_public_profile(user)
