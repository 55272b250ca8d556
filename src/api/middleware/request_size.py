"""Reject request bodies above the configured size."""

import logging
from typing import Callable

from fastapi import Request, Response

from src.api.middleware.error_handler import PayloadTooLargeError, api_error_response, request_id_for
from src.core.config import get_settings

logger = logging.getLogger(__name__)

BODY_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


async def request_size_limit_middleware(
    request: Request,
    call_next: Callable[[Request], Response],
) -> Response:
    """Answer 413 when the declared Content-Length exceeds the limit."""
    if request.method in BODY_METHODS:
        declared = request.headers.get("content-length", "")
        max_size = get_settings().max_request_body_size

        if declared.isdigit() and int(declared) > max_size:
            logger.warning("Rejected %s %s: body of %s bytes (max %d)", request.method, request.url.path, declared, max_size)
            error = PayloadTooLargeError(f"Request body exceeds maximum size of {max_size} bytes")
            return api_error_response(error, request_id_for(request))

    return await call_next(request)
