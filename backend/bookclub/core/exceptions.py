"""
Domain errors raised by the service layer.

Each error carries the HTTP status it maps to at the request boundary,
so routes can let them propagate instead of translating by hand.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from bookclub.core.logging import get_logger

logger = get_logger(__name__)


class BookClubError(Exception):
    """Base class for errors that surface to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Unexpected error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(BookClubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class Forbidden(BookClubError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not allowed"


class NotFound(BookClubError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ValidationError(BookClubError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class PartialSetError(ValidationError):
    default_message = "Question ids must match the book's questions exactly"


class SelfDeletionError(ValidationError):
    default_message = "You cannot delete your own account"


class ConflictError(BookClubError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class InvalidStateError(BookClubError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Operation not allowed in the current state"


class IntegrityError(BookClubError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Operation failed and was rolled back"


class CodeGenerationExhausted(IntegrityError):
    default_message = "Could not generate a unique invite code"


async def bookclub_error_handler(request: Request, exc: BookClubError) -> JSONResponse:
    """Map a domain error to a JSON response."""
    if exc.status_code >= 500:
        logger.error(
            f"{type(exc).__name__}: {exc.message}",
            extra={"extra_fields": {"path": request.url.path}},
        )

    headers = None
    if isinstance(exc, Unauthenticated):
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )
