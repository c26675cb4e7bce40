import math

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.core.database import LIKE_ESCAPE, commit_or_conflict, like_pattern
from app.core.exceptions import Conflict, Forbidden, InvalidCredentials, NotFound, ValidationFailed
from app.core.logging import get_logger
from app.models.review import Review
from app.models.user import User
from app.schemas.auth import UserCreate
from app.schemas.user import (
    AdminProfile,
    FollowResult,
    ProfileUpdate,
    PublicProfile,
    ReadingStats,
    UserList,
    UserProfileResponse,
    UserSummary,
)
from app.services import auth_service
from app.services.review_service import to_review_response

logger = get_logger(__name__)

SELF_EDITABLE_FIELDS = ("display_name", "bio", "reading_goal", "is_public", "favorite_genres")


def to_public_profile(user: User) -> PublicProfile:
    """Profile fields anyone allowed to see the user may read."""
    return PublicProfile(
        id=user.id,
        username=user.username,
        display_name=user.display_name,
        bio=user.bio or "",
        avatar=user.avatar or "",
        favorite_genres=list(user.favorite_genres or []),
        reading_goal=user.reading_goal,
        is_public=user.is_public,
        followers=[u.id for u in user.followers],
        following=[u.id for u in user.following],
        join_date=user.join_date,
    )


def to_admin_profile(user: User) -> AdminProfile:
    """Public profile plus account fields visible to administrators."""
    return AdminProfile(
        **to_public_profile(user).model_dump(),
        email=user.email,
        is_admin=user.is_admin,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user


def register(db: Session, user_data: UserCreate) -> User:
    """Create an account. Username and email must both be unused."""
    if auth_service.get_user_by_email(db, user_data.email):
        raise Conflict.for_field("email")
    if auth_service.get_user_by_username(db, user_data.username):
        raise Conflict.for_field("username")

    user = User(
        username=user_data.username,
        email=user_data.email,
        hashed_password=auth_service.get_password_hash(user_data.password),
        display_name=user_data.display_name,
        bio="",
        avatar="",
        favorite_genres=[],
    )
    db.add(user)
    commit_or_conflict(db)
    db.refresh(user)

    logger.info(
        f"Registered user {user.username}",
        extra={"extra_fields": {"user_id": user.id}},
    )
    return user


def login(db: Session, login: str, password: str) -> User:
    user = auth_service.authenticate_user(db, login, password)
    if not user:
        logger.info("Failed login attempt")
        raise InvalidCredentials()
    return user


def update_profile(db: Session, user: User, updates: ProfileUpdate) -> User:
    """Apply whitelisted self-service profile changes."""
    update_data = updates.model_dump(exclude_unset=True, include=set(SELF_EDITABLE_FIELDS))
    for field, value in update_data.items():
        if value is None:
            continue
        setattr(user, field, value)

    commit_or_conflict(db)
    db.refresh(user)
    return user


def can_view_profile(user: User, requester: User | None) -> bool:
    if user.is_public:
        return True
    if requester is None:
        return False
    return requester.id == user.id or requester.is_admin


def get_profile(db: Session, username: str, requester: User | None) -> UserProfileResponse:
    """Public profile with reading stats and the latest public reviews."""
    user = db.query(User).filter(User.username == username).first()
    if not user:
        raise NotFound("User not found")

    if not can_view_profile(user, requester):
        raise Forbidden("This profile is private")

    recent_reviews = (
        db.query(Review)
        .filter(Review.user_id == user.id, Review.is_public)
        .order_by(Review.updated_at.desc())
        .limit(5)
        .all()
    )

    return UserProfileResponse(
        user=to_public_profile(user),
        stats=_reading_stats(db, user.id),
        recent_reviews=[to_review_response(review) for review in recent_reviews],
    )


def _reading_stats(db: Session, user_id: int) -> ReadingStats:
    """Count a user's books per reading status."""
    rows = (
        db.query(Review.read_status, func.count(Review.id))
        .filter(Review.user_id == user_id)
        .group_by(Review.read_status)
        .all()
    )
    counts = dict(rows)

    return ReadingStats(
        read=counts.get("read", 0),
        currently_reading=counts.get("currently-reading", 0),
        want_to_read=counts.get("want-to-read", 0),
        total_books=sum(counts.values()),
    )


def search_users(db: Session, q: str, page: int = 1, limit: int = 20) -> UserList:
    """Find public users whose username or display name contains ``q``."""
    pattern = like_pattern(q)
    query = db.query(User).filter(
        User.is_public,
        or_(
            func.lower(User.username).like(pattern, escape=LIKE_ESCAPE),
            func.lower(User.display_name).like(pattern, escape=LIKE_ESCAPE),
        ),
    )

    total = query.count()
    users = query.order_by(User.username).offset((page - 1) * limit).limit(limit).all()

    return UserList(
        users=[UserSummary.model_validate(u) for u in users],
        total=total,
        page=page,
        total_pages=math.ceil(total / limit),
    )


def toggle_follow(db: Session, current_user: User, target_id: int) -> FollowResult:
    """
    Follow ``target_id``, or unfollow when already following.

    Both sides of the relationship are one row in ``follows``, written in a
    single commit, so the follower and following sets always mirror each other.
    """
    if target_id == current_user.id:
        raise ValidationFailed(
            "Cannot follow yourself",
            errors=[{"field": "user_id", "message": "Cannot follow yourself"}],
        )

    target = get_user(db, target_id)

    is_following = target in current_user.following
    if is_following:
        current_user.following.remove(target)
    else:
        current_user.following.append(target)

    commit_or_conflict(db)
    db.refresh(target)

    logger.info(
        f"User {current_user.id} {'unfollowed' if is_following else 'followed'} user {target.id}"
    )

    return FollowResult(
        following=not is_following,
        followers_count=len(target.followers),
        following_count=len(target.following),
    )


def list_followers(db: Session, user_id: int, page: int = 1, limit: int = 20) -> UserList:
    user = get_user(db, user_id)
    return _paginate_public(list(user.followers), page, limit)


def list_following(db: Session, user_id: int, page: int = 1, limit: int = 20) -> UserList:
    user = get_user(db, user_id)
    return _paginate_public(list(user.following), page, limit)


def _paginate_public(users: list[User], page: int, limit: int) -> UserList:
    visible = sorted((u for u in users if u.is_public), key=lambda u: u.username)
    total = len(visible)
    start = (page - 1) * limit

    return UserList(
        users=[UserSummary.model_validate(u) for u in visible[start : start + limit]],
        total=total,
        page=page,
        total_pages=math.ceil(total / limit),
    )
