from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.exceptions import ValidationFailed
from app.models.user import User
from app.schemas.user import FollowResult, UserList, UserProfileResponse
from app.services import auth_service, user_service

router = APIRouter()


@router.get("", response_model=UserList)
async def search_users(
    q: str = Query(..., min_length=1, max_length=100, description="Username or display name"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    db: Session = Depends(get_db),
):
    """Search public profiles."""
    query = q.strip()
    if not query:
        raise ValidationFailed.for_field("q", "Search query must not be blank")

    return user_service.search_users(db, query, page=page, limit=limit)


@router.get("/{username}", response_model=UserProfileResponse)
async def get_profile(
    username: str,
    current_user: User | None = Depends(auth_service.get_current_user_optional),
    db: Session = Depends(get_db),
):
    """Profile, reading stats and recent reviews. Private profiles need the owner or an admin."""
    return user_service.get_profile(db, username, current_user)


@router.post("/{user_id}/follow", response_model=FollowResult)
async def toggle_follow(
    user_id: int,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    """Follow a user, or unfollow when already following."""
    return user_service.toggle_follow(db, current_user, user_id)


@router.get("/{user_id}/followers", response_model=UserList)
async def list_followers(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    db: Session = Depends(get_db),
):
    return user_service.list_followers(db, user_id, page=page, limit=limit)


@router.get("/{user_id}/following", response_model=UserList)
async def list_following(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    db: Session = Depends(get_db),
):
    return user_service.list_following(db, user_id, page=page, limit=limit)
