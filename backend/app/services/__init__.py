from app.services import (
    auth_service,
    book_service,
    review_service,
    user_service,
    admin_service,
)
from app.services.external_apis import (
    CatalogResult,
    CatalogTimeoutError,
    CatalogUnavailableError,
    GoogleBooksClient,
    get_catalog_client,
)

__all__ = [
    "auth_service",
    "user_service",
    "book_service",
    "review_service",
    "admin_service",
    # External catalog
    "GoogleBooksClient",
    "CatalogResult",
    "CatalogUnavailableError",
    "CatalogTimeoutError",
    "get_catalog_client",
]
