"""Standardized error handling for the API.

This module provides:
1. Custom exception classes for validation, lookup, integrity and upstream errors
2. Exception handlers for FastAPI
3. Standard error response models

Usage:
    from devevent.errors import EventNotFoundError, InvalidFieldError

    # In services and controllers:
    if event is None:
        raise EventNotFoundError(slug)

    # Register handlers in main.py:
    from devevent.errors import register_exception_handlers
    register_exception_handlers(app)
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str
    detail: str | None = None
    error_code: str | None = None
    context: dict[str, Any] | None = None


class APIError(Exception):
    """Base class for API errors."""

    status_code: int = 500
    error: str = "internal_error"
    detail: str = "An unexpected error occurred"

    def __init__(
        self,
        detail: str | None = None,
        error_code: str | None = None,
        **context: Any,
    ) -> None:
        self.detail = detail or self.__class__.detail
        self.error_code = error_code
        self.context = context if context else None
        super().__init__(self.detail)

    def to_response(self) -> ErrorResponse:
        """Convert exception to error response model."""
        return ErrorResponse(
            error=self.error,
            detail=self.detail,
            error_code=self.error_code,
            context=self.context,
        )


class BadRequestError(APIError):
    """Bad request error (400)."""

    status_code = 400
    error = "bad_request"
    detail = "Invalid request"


class InvalidFieldError(BadRequestError):
    """A single input field failed validation or normalization."""

    def __init__(self, field: str, detail: str) -> None:
        super().__init__(detail=detail, error_code="INVALID_FIELD", field=field)
        self.field = field


class NotFoundError(APIError):
    """Resource not found error (404)."""

    status_code = 404
    error = "not_found"
    detail = "Resource not found"


class EventNotFoundError(NotFoundError):
    """No event matches the requested slug or id."""

    def __init__(self, key: str | int) -> None:
        if isinstance(key, int):
            super().__init__(
                detail=f"Event with id {key} not found",
                error_code="EVENT_NOT_FOUND",
                event_id=key,
            )
        else:
            super().__init__(
                detail=f"Event with slug '{key}' not found",
                error_code="EVENT_NOT_FOUND",
                slug=key,
            )


class ConflictError(APIError):
    """Integrity violation (409)."""

    status_code = 409
    error = "conflict"
    detail = "Write rejected by an integrity check"


class DuplicateSlugError(ConflictError):
    """Another event already holds the derived slug."""

    def __init__(self, slug: str) -> None:
        super().__init__(
            detail=f"An event with slug '{slug}' already exists",
            error_code="DUPLICATE_SLUG",
            slug=slug,
        )
        self.slug = slug


class EventReferenceError(ConflictError):
    """A booking references an event that does not exist."""

    def __init__(self, event_id: int) -> None:
        super().__init__(
            detail=f"Event with ID {event_id} does not exist",
            error_code="EVENT_REFERENCE_MISSING",
            event_id=event_id,
        )
        self.event_id = event_id


class ServiceUnavailableError(APIError):
    """Service unavailable error (503)."""

    status_code = 503
    error = "service_unavailable"
    detail = "Service temporarily unavailable"


class DatabaseError(APIError):
    """Database error (500)."""

    status_code = 500
    error = "database_error"
    detail = "Database operation failed"


class ImageUploadError(APIError):
    """Image hosting failure (500)."""

    status_code = 500
    error = "upload_failed"
    detail = "Image upload failed"


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API errors."""
    logger.warning(
        "API error: %s (status=%d, path=%s)",
        exc.detail,
        exc.status_code,
        request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(exclude_none=True),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions."""
    logger.exception("Unhandled exception: %s (path=%s)", exc, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="internal_error",
            detail="An unexpected error occurred",
        ).model_dump(exclude_none=True),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Translate driver failures raised inside the block into ``DatabaseError``.

    The cause is logged; the caller only sees a generic message.
    """
    try:
        yield
    except psycopg.Error as e:
        logger.exception("Failed to %s", action)
        raise DatabaseError(detail=f"Failed to {action}") from e
