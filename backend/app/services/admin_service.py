"""
Account administration: listing, editing, password resets, deletion and stats.

Callers are expected to have passed the ``get_current_admin`` dependency.
"""

import calendar
import math
from datetime import datetime

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.core.database import LIKE_ESCAPE, commit_or_conflict, like_pattern
from app.core.exceptions import Conflict
from app.core.logging import get_logger
from app.models.review import Review, review_likes
from app.models.user import User, follows
from app.schemas.admin import AdminStats, AdminUserList, AdminUserUpdate
from app.services import auth_service
from app.services.user_service import get_user, to_admin_profile

logger = get_logger(__name__)

ADMIN_EDITABLE_FIELDS = (
    "username",
    "email",
    "display_name",
    "bio",
    "is_admin",
    "is_public",
    "favorite_genres",
    "reading_goal",
)


def list_users(db: Session, page: int = 1, limit: int = 20, search: str | None = None) -> AdminUserList:
    """Newest accounts first, optionally filtered by username, email or display name."""
    query = db.query(User)

    if search:
        pattern = like_pattern(search)
        query = query.filter(
            or_(
                func.lower(User.username).like(pattern, escape=LIKE_ESCAPE),
                func.lower(User.email).like(pattern, escape=LIKE_ESCAPE),
                func.lower(User.display_name).like(pattern, escape=LIKE_ESCAPE),
            )
        )

    total = query.count()
    users = (
        query.order_by(User.created_at.desc(), User.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return AdminUserList(
        users=[to_admin_profile(u) for u in users],
        total_users=total,
        total_pages=math.ceil(total / limit),
        current_page=page,
    )


def update_user(db: Session, user_id: int, updates: AdminUserUpdate) -> User:
    user = get_user(db, user_id)
    update_data = updates.model_dump(exclude_unset=True, include=set(ADMIN_EDITABLE_FIELDS))

    for field in ("username", "email"):
        value = update_data.get(field)
        if value is None or value == getattr(user, field):
            continue
        taken = (
            db.query(User)
            .filter(func.lower(getattr(User, field)) == value.lower(), User.id != user.id)
            .first()
        )
        if taken:
            raise Conflict.for_field(field)

    for field, value in update_data.items():
        if value is None:
            continue
        setattr(user, field, value)

    commit_or_conflict(db)
    db.refresh(user)

    logger.info(
        f"Admin updated user {user.id}",
        extra={"extra_fields": {"fields": sorted(update_data)}},
    )
    return user


def reset_password(db: Session, user_id: int, new_password: str) -> User:
    user = get_user(db, user_id)
    user.hashed_password = auth_service.get_password_hash(new_password)
    commit_or_conflict(db)

    logger.info(f"Admin reset password for user {user.id}")
    return user


def delete_user(db: Session, user_id: int) -> None:
    """
    Hard-delete an account.

    Follow edges and likes go with it. Reviews stay, detached from their
    author, so book ratings are unchanged.
    """
    user = get_user(db, user_id)

    db.query(Review).filter(Review.user_id == user.id).update(
        {Review.user_id: None}, synchronize_session="fetch"
    )
    db.execute(
        follows.delete().where(
            or_(follows.c.follower_id == user.id, follows.c.followed_id == user.id)
        )
    )
    db.execute(review_likes.delete().where(review_likes.c.user_id == user.id))

    # Association rows are gone; keep the ORM from deleting them again
    db.expire(user, ["following", "followers", "reviews"])
    db.delete(user)
    commit_or_conflict(db)

    # Cached like lists may still reference the deleted account
    db.expire_all()

    logger.info(f"Admin deleted user {user_id}")


def _one_month_ago(now: datetime) -> datetime:
    year, month = (now.year, now.month - 1) if now.month > 1 else (now.year - 1, 12)
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def get_stats(db: Session) -> AdminStats:
    total_users = db.query(func.count(User.id)).scalar() or 0
    total_admins = db.query(func.count(User.id)).filter(User.is_admin).scalar() or 0
    new_users = (
        db.query(func.count(User.id))
        .filter(User.created_at >= _one_month_ago(datetime.utcnow()))
        .scalar()
        or 0
    )

    return AdminStats(
        total_users=total_users,
        total_admins=total_admins,
        new_users_this_month=new_users,
        active_users=total_users,
    )
