"""
HTTP client for the bookstore API.

Wraps every endpoint in a method returning decoded JSON. The bearer token is
read from a TokenStore on each request, so a login in one process is seen by
the next.
"""

from typing import Any

import httpx

from app.client.token_store import TokenStore

DEFAULT_API_URL = "http://localhost:8000"
API_PREFIX = "/api/v1"


class ApiError(Exception):
    """A non-2xx answer from the API."""

    def __init__(self, status_code: int, message: str, errors: list | None = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


class BookstoreClient:
    def __init__(
        self,
        base_url: str | None = None,
        token_store: TokenStore | None = None,
        timeout: float = 10.0,
        http: httpx.Client | None = None,
    ):
        self.token_store = token_store or TokenStore()
        self.base_url = (base_url or self.token_store.api_url or DEFAULT_API_URL).rstrip("/")
        self.http = http or httpx.Client(base_url=self.base_url, timeout=timeout)

    def close(self) -> None:
        self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _headers(self) -> dict[str, str]:
        token = self.token_store.token
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _request(self, method: str, path: str, prefix: str = API_PREFIX, **kwargs) -> Any:
        response = self.http.request(method, f"{prefix}{path}", headers=self._headers(), **kwargs)

        if response.is_success:
            return response.json()

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        raise ApiError(
            response.status_code,
            body.get("detail") or response.reason_phrase,
            body.get("errors"),
        )

    # Auth

    def register(self, username: str, email: str, password: str, display_name: str) -> dict:
        data = self._request(
            "POST",
            "/auth/register",
            json={
                "username": username,
                "email": email,
                "password": password,
                "display_name": display_name,
            },
        )
        self.token_store.save(data["access_token"], self.base_url)
        return data

    def login(self, login: str, password: str) -> dict:
        data = self._request("POST", "/auth/login", json={"login": login, "password": password})
        self.token_store.save(data["access_token"], self.base_url)
        return data

    def logout(self) -> None:
        self.token_store.clear()

    def me(self) -> dict:
        return self._request("GET", "/auth/me")

    def update_profile(self, **fields) -> dict:
        return self._request("PUT", "/auth/profile", json=fields)

    # Users

    def get_profile(self, username: str) -> dict:
        return self._request("GET", f"/users/{username}")

    def search_users(self, q: str, page: int = 1, limit: int = 20) -> dict:
        return self._request("GET", "/users", params={"q": q, "page": page, "limit": limit})

    def toggle_follow(self, user_id: int) -> dict:
        return self._request("POST", f"/users/{user_id}/follow")

    def followers(self, user_id: int, page: int = 1) -> dict:
        return self._request("GET", f"/users/{user_id}/followers", params={"page": page})

    def following(self, user_id: int, page: int = 1) -> dict:
        return self._request("GET", f"/users/{user_id}/following", params={"page": page})

    # Books

    def search_books(self, q: str, start_index: int = 0, max_results: int = 20) -> dict:
        """
        Search books, degrading to an empty result when the API is unreachable.

        Timeouts, transport failures and server errors never raise; the
        returned ``message`` says what went wrong. Client errors still raise.
        """
        empty = {"local_books": [], "external_books": [], "total_local": 0, "total_external": 0}
        try:
            return self._request(
                "GET",
                "/books/search",
                params={"q": q, "start_index": start_index, "max_results": max_results},
            )
        except httpx.TimeoutException:
            return {**empty, "message": "Search timed out. Please try again."}
        except httpx.TransportError:
            return {**empty, "message": "Could not reach the bookstore. Please try again later."}
        except ApiError as e:
            if e.status_code < 500:
                raise
            return {**empty, "message": "Search is temporarily unavailable."}

    def get_book(self, book_id: int) -> dict:
        return self._request("GET", f"/books/{book_id}")

    def import_book(self, **fields) -> dict:
        return self._request("POST", "/books", json=fields)

    def trending(self, limit: int = 20) -> list:
        return self._request("GET", "/books/trending", params={"limit": limit})

    def recent(self, limit: int = 20) -> list:
        return self._request("GET", "/books/recent", params={"limit": limit})

    # Reviews

    def upsert_review(self, book_id: int, rating: int, read_status: str, **fields) -> dict:
        payload = {"book_id": book_id, "rating": rating, "read_status": read_status, **fields}
        return self._request("POST", "/reviews", json=payload)

    def user_reviews(self, user_id: int, status: str | None = None, page: int = 1) -> dict:
        params = {"page": page}
        if status:
            params["status"] = status
        return self._request("GET", f"/reviews/user/{user_id}", params=params)

    def book_reviews(self, book_id: int, page: int = 1) -> dict:
        return self._request("GET", f"/reviews/book/{book_id}", params={"page": page})

    def feed(self, page: int = 1) -> dict:
        return self._request("GET", "/reviews/feed/following", params={"page": page})

    def toggle_like(self, review_id: int) -> dict:
        return self._request("POST", f"/reviews/{review_id}/like")

    def delete_review(self, review_id: int) -> dict:
        return self._request("DELETE", f"/reviews/{review_id}")

    # Admin

    def admin_users(self, page: int = 1, limit: int = 20, search: str | None = None) -> dict:
        params: dict[str, Any] = {"page": page, "limit": limit}
        if search:
            params["search"] = search
        return self._request("GET", "/admin/users", params=params)

    def admin_get_user(self, user_id: int) -> dict:
        return self._request("GET", f"/admin/users/{user_id}")

    def admin_update_user(self, user_id: int, **fields) -> dict:
        return self._request("PUT", f"/admin/users/{user_id}", json=fields)

    def admin_reset_password(self, user_id: int, new_password: str) -> dict:
        return self._request(
            "POST", f"/admin/users/{user_id}/reset-password", json={"new_password": new_password}
        )

    def admin_delete_user(self, user_id: int) -> dict:
        return self._request("DELETE", f"/admin/users/{user_id}")

    def admin_stats(self) -> dict:
        return self._request("GET", "/admin/stats")

    # Health

    def health(self) -> dict:
        return self._request("GET", "/health", prefix="")
