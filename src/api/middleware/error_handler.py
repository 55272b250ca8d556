"""Error types raised by services and their uniform JSON rendering."""

import logging
import time
import uuid
from typing import Any, Callable

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from postgrest.exceptions import APIError as PostgrestError

from src.core.supabase import NO_ROWS_FOUND, UNIQUE_VIOLATION
from src.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class APIError(Exception):
    """Base class for errors that map onto an HTTP response.

    Subclasses only set the status code, the machine-readable
    ``error_type`` and a default message.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type: str = "api_error"
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None, details: list[dict[str, Any]] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def headers(self) -> dict[str, str]:
        """Extra response headers for this error."""
        return {}


class NotFoundError(APIError):
    status_code = status.HTTP_404_NOT_FOUND
    error_type = "not_found"
    default_message = "Resource not found"


class ValidationError(APIError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_type = "validation_error"
    default_message = "Validation error"


class ConflictError(APIError):
    status_code = status.HTTP_409_CONFLICT
    error_type = "conflict"
    default_message = "Resource already exists"


class AuthenticationError(APIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_type = "authentication_error"
    default_message = "Authentication required"


class AuthorizationError(APIError):
    status_code = status.HTTP_403_FORBIDDEN
    error_type = "authorization_error"
    default_message = "Access denied"


class PayloadTooLargeError(APIError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    error_type = "request_too_large"
    default_message = "Request body is too large"


class RateLimitError(APIError):
    """Too many attempts; carries the retry delay for the response headers."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error_type = "rate_limit_exceeded"
    default_message = "Rate limit exceeded"

    def __init__(
        self,
        message: str | None = None,
        retry_after: int = 60,
        limit: int | None = None,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.retry_after = retry_after
        self.limit = limit

    def headers(self) -> dict[str, str]:
        headers = {
            "Retry-After": str(self.retry_after),
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": str(int(time.time()) + self.retry_after),
        }
        if self.limit is not None:
            headers["X-RateLimit-Limit"] = str(self.limit)
        return headers


def from_database_error(error: PostgrestError) -> APIError | None:
    """Translate a PostgREST error into an APIError.

    Returns None for codes that have no client-facing meaning.
    """
    if error.code == UNIQUE_VIOLATION:
        return ConflictError(error.details or "Resource already exists")
    if error.code == NO_ROWS_FOUND:
        return NotFoundError()
    return None


def request_id_for(request: Request) -> str:
    """Return the request's ID, taking the caller's header when present."""
    request_id = getattr(request.state, "request_id", None)
    if request_id is None:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
    return request_id


def create_error_response(
    error_type: str,
    message: str,
    status_code: int,
    details: list[dict[str, Any]] | None = None,
    request_id: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the JSON body every error response shares."""
    body = ErrorResponse.from_exception(
        error_type=error_type,
        message=message,
        details=details,
        request_id=request_id,
    )
    response = JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )
    if request_id:
        response.headers[REQUEST_ID_HEADER] = request_id
    return response


def api_error_response(error: APIError, request_id: str | None = None) -> JSONResponse:
    """Render an APIError."""
    return create_error_response(
        error_type=error.error_type,
        message=error.message,
        status_code=error.status_code,
        details=error.details,
        request_id=request_id,
        headers=error.headers(),
    )


def _internal_error_response(request_id: str) -> JSONResponse:
    return create_error_response(
        error_type="internal_error",
        message=APIError.default_message,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        request_id=request_id,
    )


async def api_error_exception_handler(request: Request, exc: APIError) -> JSONResponse:
    """Render APIErrors raised by route dependencies and handlers."""
    request_id = request_id_for(request)
    logger.warning(
        "%s %s -> %s: %s",
        request.method,
        request.url.path,
        exc.error_type,
        exc.message,
        extra={"request_id": request_id},
    )
    return api_error_response(exc, request_id)


async def database_error_exception_handler(request: Request, exc: PostgrestError) -> JSONResponse:
    """Render PostgREST errors that reached a route without being handled."""
    request_id = request_id_for(request)
    translated = from_database_error(exc)
    if translated is None:
        logger.error("Database error %s: %s", exc.code, exc.message, extra={"request_id": request_id})
        return _internal_error_response(request_id)
    return await api_error_exception_handler(request, translated)


async def error_handler_middleware(request: Request, call_next: Callable[[Request], Any]) -> Response:
    """Tag each request with an ID and turn escaped exceptions into JSON.

    APIErrors and database errors are normally rendered by the exception
    handlers above. Anything else is logged with its stack trace and
    answered with a generic 500 body.
    """
    request_id = request_id_for(request)

    try:
        response = await call_next(request)
    except APIError as e:
        return await api_error_exception_handler(request, e)
    except Exception:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path, extra={"request_id": request_id})
        return _internal_error_response(request_id)

    response.headers[REQUEST_ID_HEADER] = request_id
    return response
