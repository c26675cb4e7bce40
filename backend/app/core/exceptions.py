"""
Application error taxonomy and the FastAPI handlers that render it.

Every error leaves the API as JSON with a ``detail`` message; validation
failures also carry an ``errors`` list with one entry per offending field.
"""

import re
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from app.core.config import get_settings
from app.core.logging import get_logger

logger = get_logger(__name__)

_PG_KEY_PATTERN = re.compile(r"Key \(([^)]+)\)")
_SQLITE_UNIQUE_PATTERN = re.compile(r"UNIQUE constraint failed: ([\w.]+)")


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, headers: dict[str, str] | None = None):
        self.message = message or self.message
        self.headers = headers
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message}


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation failed"

    def __init__(self, message: str | None = None, errors: list[dict[str, str]] | None = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "errors": self.errors}

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailed":
        return cls(errors=[{"field": field, "message": message}])


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Could not validate credentials"

    def __init__(self, message: str | None = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class InvalidCredentials(Unauthenticated):
    # Same message for unknown identifier and wrong password
    message = "Invalid credentials"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Not authorized to perform this action"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Resource not found"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    message = "Resource already exists"

    def __init__(self, message: str | None = None, field: str | None = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        data = {"detail": self.message}
        if self.field:
            data["field"] = self.field
        return data

    @classmethod
    def for_field(cls, field: str) -> "Conflict":
        label = field.replace("_", " ").capitalize()
        return cls(f"{label} already exists", field=field)

    @classmethod
    def from_integrity_error(cls, exc: IntegrityError) -> "Conflict":
        """Build a Conflict naming the column whose uniqueness was violated."""
        text = str(exc.orig)

        match = _PG_KEY_PATTERN.search(text)
        if match:
            field = match.group(1).split(",")[0].strip()
            return cls.for_field(field)

        match = _SQLITE_UNIQUE_PATTERN.search(text)
        if match:
            field = match.group(1).split(".")[-1]
            return cls.for_field(field)

        return cls()


def _format_validation_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    errors = []
    for error in exc.errors():
        # Drop the "body"/"query"/"path" prefix from the location
        loc = [str(part) for part in error.get("loc", ())]
        if len(loc) > 1 and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        errors.append({"field": ".".join(loc), "message": error.get("msg", "")})
    return errors


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = _format_validation_errors(exc)
    logger.warning(
        f"Validation failed: {request.method} {request.url.path}",
        extra={"extra_fields": {"errors": errors}},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation failed", "errors": errors},
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    conflict = Conflict.from_integrity_error(exc)
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {conflict.message}")
    return JSONResponse(status_code=conflict.status_code, content=conflict.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled error: {request.method} {request.url.path}",
        extra={"extra_fields": {"error": str(exc), "error_type": exc.__class__.__name__}},
        exc_info=exc,
    )
    content = {"detail": "Internal server error"}
    if get_settings().show_error_details:
        content["error"] = str(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
