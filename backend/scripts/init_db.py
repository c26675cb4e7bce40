"""
Initialize database tables.

Run this once after deployment to create all tables, optionally loading the
starter catalog.
Usage: python -m scripts.init_db [--seed]
"""

import argparse

from app.core.database import Base, SessionLocal, engine
from app.models import Book, Review, User  # noqa: F401
from app.scripts.seed_database import seed_books


def init_db(seed: bool = False):
    """Create all database tables."""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("Database tables created successfully!")

    if seed:
        db = SessionLocal()
        try:
            print(f"Seeded {seed_books(db)} books.")
        finally:
            db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create database tables")
    parser.add_argument("--seed", action="store_true", help="Load the starter catalog")
    args = parser.parse_args()
    init_db(seed=args.seed)
