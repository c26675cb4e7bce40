"""
Admin API endpoints for account management.

Every route requires an administrator's bearer token.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.admin import (
    AdminActionResult,
    AdminStats,
    AdminUserList,
    AdminUserUpdate,
    PasswordReset,
)
from app.schemas.user import AdminProfile
from app.services import admin_service, auth_service, user_service

router = APIRouter(dependencies=[Depends(auth_service.get_current_admin)])


@router.get("/users", response_model=AdminUserList)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str | None = Query(None, max_length=100),
    db: Session = Depends(get_db),
):
    """List accounts, newest first."""
    return admin_service.list_users(
        db, page=page, limit=limit, search=search.strip() if search else None
    )


@router.get("/users/{user_id}", response_model=AdminProfile)
async def get_user(user_id: int, db: Session = Depends(get_db)):
    return user_service.to_admin_profile(user_service.get_user(db, user_id))


@router.put("/users/{user_id}", response_model=AdminProfile)
async def update_user(
    user_id: int,
    updates: AdminUserUpdate,
    db: Session = Depends(get_db),
):
    user = admin_service.update_user(db, user_id, updates)
    return user_service.to_admin_profile(user)


@router.post("/users/{user_id}/reset-password", response_model=AdminActionResult)
async def reset_password(
    user_id: int,
    payload: PasswordReset,
    db: Session = Depends(get_db),
):
    user = admin_service.reset_password(db, user_id, payload.new_password)
    return AdminActionResult(message="Password reset successfully", user_id=user.id)


@router.delete("/users/{user_id}", response_model=AdminActionResult)
async def delete_user(user_id: int, db: Session = Depends(get_db)):
    """Delete an account. Its reviews are kept without an author."""
    admin_service.delete_user(db, user_id)
    return AdminActionResult(message="User deleted successfully", user_id=user_id)


@router.get("/stats", response_model=AdminStats)
async def get_stats(db: Session = Depends(get_db)):
    return admin_service.get_stats(db)
