"""
Create an administrator account, or promote an existing one.

Credentials default to ADMIN_EMAIL / ADMIN_USERNAME / ADMIN_PASSWORD from the
environment.
Usage: python -m scripts.create_admin [--email E] [--username U] [--password P]
"""

import argparse
import sys

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import Base, SessionLocal, engine
from app.models.user import User
from app.services.auth_service import get_password_hash, get_user_by_email


def create_admin(
    db: Session,
    email: str,
    username: str,
    password: str,
    display_name: str = "Administrator",
) -> tuple[User, bool]:
    """
    Ensure an admin account exists for ``email``.

    An existing user with that email is promoted and keeps its password.

    Returns:
        (user, created)
    """
    existing = get_user_by_email(db, email)
    if existing:
        if not existing.is_admin:
            existing.is_admin = True
            db.commit()
        return existing, False

    user = User(
        username=username,
        email=email.strip().lower(),
        hashed_password=get_password_hash(password),
        display_name=display_name,
        bio="System Administrator",
        is_admin=True,
        favorite_genres=[],
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user, True


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Create or promote an admin account")
    parser.add_argument("--email", type=str, default=settings.ADMIN_EMAIL)
    parser.add_argument("--username", type=str, default=settings.ADMIN_USERNAME)
    parser.add_argument("--password", type=str, default=settings.ADMIN_PASSWORD)
    parser.add_argument("--display-name", type=str, default="Administrator")
    args = parser.parse_args()

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        existing = get_user_by_email(db, args.email)
        if not existing and len(args.password) < 6:
            print("A password of at least 6 characters is required (--password or ADMIN_PASSWORD).")
            sys.exit(1)

        user, created = create_admin(
            db, args.email, args.username, args.password, display_name=args.display_name
        )

        if created:
            print("Admin user created successfully!")
        else:
            print("Existing user is now an admin.")
        print(f"   Username: {user.username}")
        print(f"   Email: {user.email}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
