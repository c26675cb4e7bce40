"""
External catalog client used by book search.

Talks to the Google Books volumes API and normalizes each volume into the
local book shape so search results can be imported unchanged.
"""

from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import ValidationError

from app.core.config import get_settings
from app.core.logging import get_logger
from app.schemas.book import (
    AUTHOR_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    CatalogBook,
    parse_published_date,
)

settings = get_settings()
logger = get_logger(__name__)


def _clip(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


class CatalogUnavailableError(Exception):
    """The external catalog could not be reached or returned an unusable reply."""


class CatalogTimeoutError(CatalogUnavailableError):
    """The external catalog did not answer within the request timeout."""


@dataclass
class CatalogResult:
    """One page of catalog hits."""

    books: list[CatalogBook] = field(default_factory=list)
    total: int = 0


class GoogleBooksClient:
    """Client for the Google Books API."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.GOOGLE_BOOKS_BASE_URL
        self.api_key = api_key if api_key is not None else settings.GOOGLE_BOOKS_API_KEY
        self.timeout = timeout or settings.CATALOG_TIMEOUT_SECONDS
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
            headers={"User-Agent": "MoopsBookstore/1.0"},
        )

    async def search(
        self, query: str, start_index: int = 0, max_results: int = 20
    ) -> CatalogResult:
        """
        Search the catalog for volumes matching ``query``.

        Args:
            query: Free-text search
            start_index: Offset of the first hit
            max_results: Page size (the API caps this at 40)

        Returns:
            CatalogResult with normalized books and the catalog's total count

        Raises:
            CatalogTimeoutError: the request timed out
            CatalogUnavailableError: transport failure, non-2xx reply or bad body
        """
        params: dict[str, Any] = {
            "q": query,
            "startIndex": start_index,
            "maxResults": max_results,
        }
        if self.api_key:
            params["key"] = self.api_key

        try:
            async with self._client() as client:
                response = await client.get("/volumes", params=params)
        except httpx.TimeoutException as e:
            logger.warning(f"Catalog search timed out for query {query!r}")
            raise CatalogTimeoutError("Catalog request timed out") from e
        except httpx.HTTPError as e:
            logger.warning(f"Catalog search failed for query {query!r}: {e}")
            raise CatalogUnavailableError(str(e)) from e

        if not response.is_success:
            logger.warning(f"Catalog returned HTTP {response.status_code} for query {query!r}")
            raise CatalogUnavailableError(f"Catalog returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise CatalogUnavailableError("Catalog returned an undecodable body") from e

        if not isinstance(data, dict):
            raise CatalogUnavailableError("Catalog returned an unexpected body")

        books = []
        for item in data.get("items") or []:
            try:
                books.append(self._parse_volume(item))
            except (ValidationError, TypeError, AttributeError) as e:
                # Malformed volumes are dropped from the page
                logger.warning(f"Skipping unparseable catalog volume: {e}")

        return CatalogResult(
            books=books,
            total=int(data.get("totalItems") or 0),
        )

    def _parse_volume(self, item: dict) -> CatalogBook:
        """Parse a volume item from Google Books."""
        volume_info = item.get("volumeInfo", {})

        cover_image = (volume_info.get("imageLinks") or {}).get("thumbnail", "")
        if cover_image.startswith("http://"):
            cover_image = cover_image.replace("http://", "https://", 1)

        title = str(volume_info.get("title") or "").strip() or "Unknown Title"
        authors = [str(a).strip() for a in volume_info.get("authors") or [] if str(a).strip()]
        author = ", ".join(authors) or "Unknown Author"

        return CatalogBook(
            google_books_id=item.get("id"),
            title=_clip(title, TITLE_MAX_LENGTH),
            author=_clip(author, AUTHOR_MAX_LENGTH),
            description=volume_info.get("description", ""),
            published_date=parse_published_date(volume_info.get("publishedDate")),
            page_count=volume_info.get("pageCount"),
            genres=volume_info.get("categories") or [],
            cover_image=cover_image,
            language=volume_info.get("language") or "en",
            publisher=volume_info.get("publisher", ""),
            isbn=self._pick_isbn(volume_info.get("industryIdentifiers") or []),
        )

    @staticmethod
    def _pick_isbn(identifiers: list[dict]) -> str | None:
        """Prefer ISBN_13, then ISBN_10."""
        by_type = {i.get("type"): i.get("identifier") for i in identifiers}
        return by_type.get("ISBN_13") or by_type.get("ISBN_10")


def get_catalog_client() -> GoogleBooksClient:
    """FastAPI dependency providing the catalog client."""
    return GoogleBooksClient()
