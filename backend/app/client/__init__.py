from app.client.api_client import ApiError, BookstoreClient
from app.client.token_store import TokenStore

__all__ = ["ApiError", "BookstoreClient", "TokenStore"]
