"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Settings are read at import time; point the app at SQLite before importing it
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_SEED"] = "false"

from typing import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.book import Book  # noqa: E402
from app.models.user import User  # noqa: E402
from app.schemas.book import CatalogBook  # noqa: E402
from app.services.auth_service import get_password_hash, issue_token  # noqa: E402
from app.services.external_apis import (  # noqa: E402
    CatalogResult,
    CatalogUnavailableError,
    get_catalog_client,
)

# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeCatalog:
    """Stands in for GoogleBooksClient; returns canned books or raises ``error``."""

    def __init__(self):
        self.books: list[CatalogBook] = []
        self.error: Exception | None = None
        self.queries: list[str] = []

    async def search(self, query: str, start_index: int = 0, max_results: int = 20) -> CatalogResult:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return CatalogResult(books=list(self.books), total=len(self.books))


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    # Create all tables
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        # Drop all tables after test
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture(scope="function")
def client(db: Session, catalog: FakeCatalog) -> Generator[TestClient, None, None]:
    """Create a test client with database and catalog overrides."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_catalog_client] = lambda: catalog

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def make_user(db: Session, username: str, password: str = "secret1", **fields) -> User:
    user = User(
        username=username,
        email=fields.pop("email", f"{username}@example.com"),
        hashed_password=get_password_hash(password),
        display_name=fields.pop("display_name", username.capitalize()),
        **fields,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {issue_token(user)}"}


@pytest.fixture
def user_factory(db: Session):
    """Create extra users: ``user_factory("carol", is_public=False)``."""
    return lambda username, **fields: make_user(db, username, **fields)


@pytest.fixture
def token_headers():
    """Build bearer headers for any user."""
    return headers_for


@pytest.fixture
def test_user(db: Session) -> User:
    """Create a test user."""
    return make_user(db, "alice", email="alice@example.com", display_name="Alice")


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Create authorization headers."""
    return headers_for(test_user)


@pytest.fixture
def other_user(db: Session) -> User:
    return make_user(db, "bob", display_name="Bob")


@pytest.fixture
def admin_user(db: Session) -> User:
    return make_user(db, "admin", display_name="Admin", is_admin=True)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return headers_for(admin_user)


@pytest.fixture
def test_books(db: Session) -> list[Book]:
    """Create test books."""
    books = [
        Book(
            title="1984",
            author="George Orwell",
            isbn="9780451524935",
            description="A dystopian social science fiction novel.",
            genres=["Fiction", "Dystopian"],
        ),
        Book(
            title="The Great Gatsby",
            author="F. Scott Fitzgerald",
            isbn="9780743273565",
            google_books_id="gatsby123",
            description="A classic American novel set in the Jazz Age.",
        ),
        Book(
            title="Dune",
            author="Frank Herbert",
            description="Spice, sandworms and politics on Arrakis.",
        ),
    ]

    for book in books:
        db.add(book)

    db.commit()

    for book in books:
        db.refresh(book)

    return books


@pytest.fixture
def catalog_books() -> list[CatalogBook]:
    return [
        CatalogBook(
            google_books_id="vol1",
            title="Dune Messiah",
            author="Frank Herbert",
            isbn="9780593098233",
            published_date="1969",
        ),
        CatalogBook(google_books_id="vol2", title="Children of Dune", author="Frank Herbert"),
    ]


@pytest.fixture
def unavailable_catalog(catalog: FakeCatalog) -> FakeCatalog:
    catalog.error = CatalogUnavailableError("boom")
    return catalog
