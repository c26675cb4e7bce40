"""Tests for books API endpoints."""

import httpx
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.core.database import get_db
from app.main import app
from app.models.book import Book
from app.services.external_apis import CatalogTimeoutError, GoogleBooksClient, get_catalog_client


class UnreachableSession:
    """Session stand-in whose queries fail as if the database were down."""

    def query(self, *args, **kwargs):
        raise OperationalError("SELECT books", {}, Exception("connection refused"))

    def rollback(self):
        pass


class TestGetBook:
    """Test get book endpoint."""

    def test_get_book_by_id(self, client: TestClient, test_books):
        """Should return book by ID with its reviews."""
        book = test_books[0]
        response = client.get(f"/api/v1/books/{book.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["book"]["id"] == book.id
        assert data["book"]["title"] == "1984"
        assert data["book"]["author"] == "George Orwell"
        assert data["reviews"] == []

    def test_get_book_not_found(self, client: TestClient):
        """Should return 404 for non-existent book."""
        response = client.get("/api/v1/books/99999")

        assert response.status_code == 404
        assert response.json()["detail"] == "Book not found"

    def test_detail_shows_only_public_reviews(
        self, client: TestClient, test_books, auth_headers, other_user, token_headers
    ):
        book = test_books[0]
        client.post(
            "/api/v1/reviews",
            headers=auth_headers,
            json={"book_id": book.id, "rating": 5, "read_status": "read", "review_text": "Great"},
        )
        client.post(
            "/api/v1/reviews",
            headers=token_headers(other_user),
            json={"book_id": book.id, "rating": 2, "read_status": "read", "is_public": False},
        )

        data = client.get(f"/api/v1/books/{book.id}").json()

        assert len(data["reviews"]) == 1
        assert data["reviews"][0]["user"]["username"] == "alice"
        # Private reviews still count towards the rating
        assert data["book"]["ratings_count"] == 2


class TestSearchBooks:
    """Test combined local and catalog search."""

    def test_search_by_title(self, client: TestClient, test_books, catalog, catalog_books):
        """Should return local and catalog hits side by side."""
        catalog.books = catalog_books
        response = client.get("/api/v1/books/search", params={"q": "dune"})

        assert response.status_code == 200
        data = response.json()
        assert [b["title"] for b in data["local_books"]] == ["Dune"]
        assert [b["google_books_id"] for b in data["external_books"]] == ["vol1", "vol2"]
        assert data["total_local"] == 1
        assert data["total_external"] == 2
        assert data["message"] is None
        assert data["external_books"][0]["published_date"] == "1969-01-01"
        assert catalog.queries == ["dune"]

    def test_search_by_author_case_insensitive(self, client: TestClient, test_books):
        response = client.get("/api/v1/books/search", params={"q": "ORWELL"})

        assert response.status_code == 200
        assert [b["title"] for b in response.json()["local_books"]] == ["1984"]

    def test_search_by_description(self, client: TestClient, test_books):
        response = client.get("/api/v1/books/search", params={"q": "sandworms"})

        assert [b["title"] for b in response.json()["local_books"]] == ["Dune"]

    def test_search_limits_local_results(self, client: TestClient, db):
        for i in range(15):
            db.add(Book(title=f"Saga volume {i}", author="Anon"))
        db.commit()

        data = client.get("/api/v1/books/search", params={"q": "saga"}).json()

        assert len(data["local_books"]) == 10

    def test_catalog_failure_keeps_local_results(
        self, client: TestClient, test_books, unavailable_catalog
    ):
        """Should degrade to local-only results with a message."""
        response = client.get("/api/v1/books/search", params={"q": "dune"})

        assert response.status_code == 200
        data = response.json()
        assert [b["title"] for b in data["local_books"]] == ["Dune"]
        assert data["external_books"] == []
        assert data["total_external"] == 0
        assert "unavailable" in data["message"]

    def test_catalog_timeout_message(self, client: TestClient, test_books, catalog):
        catalog.error = CatalogTimeoutError("slow")

        data = client.get("/api/v1/books/search", params={"q": "dune"}).json()

        assert "timed out" in data["message"]
        assert data["total_local"] == 1

    def test_search_query_required(self, client: TestClient):
        response = client.get("/api/v1/books/search")

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "q"

    def test_search_query_too_long(self, client: TestClient):
        response = client.get("/api/v1/books/search", params={"q": "x" * 101})

        assert response.status_code == 400

    def test_blank_query_rejected(self, client: TestClient, test_books, catalog):
        response = client.get("/api/v1/books/search", params={"q": "   "})

        assert response.status_code == 400
        assert response.json()["errors"] == [{"field": "q", "message": "Search query must not be blank"}]
        assert catalog.queries == []

    def test_query_is_stripped(self, client: TestClient, test_books, catalog):
        data = client.get("/api/v1/books/search", params={"q": "  dune "}).json()

        assert [b["title"] for b in data["local_books"]] == ["Dune"]
        assert catalog.queries == ["dune"]

    def test_wildcards_match_literally(self, client: TestClient, test_books, db):
        db.add(Book(title="100% Pure", author="Anon"))
        db.commit()

        percent = client.get("/api/v1/books/search", params={"q": "%"}).json()
        underscore = client.get("/api/v1/books/search", params={"q": "_"}).json()

        assert [b["title"] for b in percent["local_books"]] == ["100% Pure"]
        assert underscore["local_books"] == []

    def test_local_failure_keeps_catalog_results(self, client: TestClient, catalog, catalog_books):
        """Should degrade to catalog-only results when the library is down."""
        catalog.books = catalog_books
        app.dependency_overrides[get_db] = lambda: UnreachableSession()

        response = client.get("/api/v1/books/search", params={"q": "dune"})

        assert response.status_code == 200
        data = response.json()
        assert data["local_books"] == []
        assert data["total_local"] == 0
        assert [b["google_books_id"] for b in data["external_books"]] == ["vol1", "vol2"]
        assert "Local library is unavailable" in data["message"]

    def test_malformed_catalog_volumes_do_not_break_search(self, client: TestClient, test_books):
        anthology = {
            "id": "anthology",
            "volumeInfo": {"title": "Collected Stories", "authors": [f"Contributor Number {i}" for i in range(30)]},
        }
        untitled = {"id": "untitled", "volumeInfo": {"title": " ", "authors": ["Frank Herbert"]}}
        broken = {"id": "broken", "volumeInfo": {"title": "Dune", "pageCount": -5}}
        payload = {"totalItems": 3, "items": [anthology, untitled, broken]}
        app.dependency_overrides[get_catalog_client] = lambda: GoogleBooksClient(
            base_url="https://books.test/v1",
            api_key="",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payload)),
        )

        response = client.get("/api/v1/books/search", params={"q": "dune"})

        assert response.status_code == 200
        data = response.json()
        assert [b["title"] for b in data["local_books"]] == ["Dune"]
        assert [b["google_books_id"] for b in data["external_books"]] == ["anthology", "untitled"]
        assert len(data["external_books"][0]["author"]) <= 255
        assert data["external_books"][1]["title"] == "Unknown Title"
        assert data["message"] is None


class TestImportBook:
    """Test idempotent book import."""

    def test_create_book(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/v1/books",
            headers=auth_headers,
            json={
                "title": "Neuromancer",
                "author": "William Gibson",
                "isbn": "9780441569595",
                "published_date": "1984-07",
                "genres": ["Science Fiction"],
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Neuromancer"
        assert data["published_date"] == "1984-07-01"
        assert data["average_rating"] == 0.0
        assert data["ratings_count"] == 0

    def test_import_same_google_id_returns_existing(self, client: TestClient, test_books, auth_headers):
        """Should return the stored book with 200 instead of duplicating it."""
        response = client.post(
            "/api/v1/books",
            headers=auth_headers,
            json={"title": "Gatsby (reprint)", "author": "Fitzgerald", "google_books_id": "gatsby123"},
        )

        assert response.status_code == 200
        assert response.json()["id"] == test_books[1].id
        assert response.json()["title"] == "The Great Gatsby"

    def test_import_matches_isbn(self, client: TestClient, db, test_books, auth_headers):
        response = client.post(
            "/api/v1/books",
            headers=auth_headers,
            json={"title": "Nineteen Eighty-Four", "author": "Orwell", "isbn": "9780451524935"},
        )

        assert response.status_code == 200
        assert response.json()["id"] == test_books[0].id
        assert db.query(Book).count() == 3

    def test_books_without_identifiers_do_not_collide(self, client: TestClient, auth_headers):
        for title in ("Untitled One", "Untitled Two"):
            response = client.post(
                "/api/v1/books",
                headers=auth_headers,
                json={"title": title, "author": "Anon", "isbn": "", "google_books_id": ""},
            )
            assert response.status_code == 201
            assert response.json()["isbn"] is None

    def test_derived_rating_fields_ignored(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/v1/books",
            headers=auth_headers,
            json={"title": "Hype", "author": "Anon", "average_rating": 5, "ratings_count": 999},
        )

        assert response.status_code == 201
        assert response.json()["average_rating"] == 0.0
        assert response.json()["ratings_count"] == 0

    def test_title_and_author_required(self, client: TestClient, auth_headers):
        response = client.post("/api/v1/books", headers=auth_headers, json={"title": "  "})

        assert response.status_code == 400
        fields = {error["field"] for error in response.json()["errors"]}
        assert fields == {"title", "author"}

    def test_import_requires_auth(self, client: TestClient):
        response = client.post("/api/v1/books", json={"title": "X", "author": "Y"})

        assert response.status_code == 401


class TestListings:
    """Test trending and recent listings."""

    def _rate(self, client, headers, book_id, rating):
        response = client.post(
            "/api/v1/reviews",
            headers=headers,
            json={"book_id": book_id, "rating": rating, "read_status": "read"},
        )
        assert response.status_code in (200, 201)

    def test_trending_orders_by_count_then_average(
        self, client: TestClient, test_books, auth_headers, other_user, token_headers
    ):
        orwell, gatsby, dune = test_books
        bob = token_headers(other_user)
        self._rate(client, auth_headers, dune.id, 3)
        self._rate(client, bob, dune.id, 3)
        self._rate(client, auth_headers, gatsby.id, 5)
        self._rate(client, auth_headers, orwell.id, 4)

        for path in ("/api/v1/books/trending", "/api/v1/books/trending/popular"):
            response = client.get(path)
            assert response.status_code == 200
            assert [b["title"] for b in response.json()] == ["Dune", "The Great Gatsby", "1984"]

    def test_recent_orders_by_creation(self, client: TestClient, test_books, auth_headers):
        client.post(
            "/api/v1/books",
            headers=auth_headers,
            json={"title": "Brand New", "author": "Anon"},
        )

        for path in ("/api/v1/books/recent", "/api/v1/books/recent/added"):
            response = client.get(path, params={"limit": 2})
            assert response.status_code == 200
            data = response.json()
            assert len(data) == 2
            assert data[0]["title"] == "Brand New"

    def test_limit_bounds(self, client: TestClient):
        assert client.get("/api/v1/books/trending", params={"limit": 0}).status_code == 400
        assert client.get("/api/v1/books/recent", params={"limit": 101}).status_code == 400
