"""
Password hashing, bearer-token issuance and the FastAPI auth dependencies.

Tokens are stateless HS256 JWTs carrying the user id in ``sub``; nothing is
stored server-side.
"""

from datetime import datetime, timedelta

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.exceptions import Forbidden, Unauthenticated
from app.core.logging import get_logger, user_id_var
from app.models.user import User

settings = get_settings()
logger = get_logger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Unrecognized or corrupt hash
        return False


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Sign a bearer token; ``data`` must carry ``sub``."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def issue_token(user: User) -> str:
    return create_access_token(data={"sub": str(user.id), "username": user.username})


def decode_access_token(token: str) -> int | None:
    """Return the user id carried by a valid token, or None."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    sub = payload.get("sub")
    if sub is None:
        return None
    try:
        return int(sub)
    except (TypeError, ValueError):
        return None


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def authenticate_user(db: Session, login: str, password: str) -> User | None:
    """Resolve a username or email and check the password."""
    login = login.strip()
    user = (
        db.query(User)
        .filter((User.username == login) | (func.lower(User.email) == login.lower()))
        .first()
    )
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user


def _resolve_user(db: Session, credentials: HTTPAuthorizationCredentials | None) -> User | None:
    if credentials is None or not credentials.credentials:
        return None

    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        return None

    return db.query(User).filter(User.id == user_id).first()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Require a valid bearer token and return its user."""
    if credentials is None:
        raise Unauthenticated("No token, authorization denied")

    user = _resolve_user(db, credentials)
    if user is None:
        raise Unauthenticated("Token is not valid")

    user_id_var.set(str(user.id))
    return user


async def get_current_user_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User | None:
    """Return the bearer's user when a valid token is present, otherwise None."""
    user = _resolve_user(db, credentials)
    if user is not None:
        user_id_var.set(str(user.id))
    return user


async def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        logger.warning(f"Non-admin user {current_user.id} attempted an admin action")
        raise Forbidden("Access denied. Admin privileges required.")
    return current_user
