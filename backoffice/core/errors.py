"""Error kinds raised by the attachment and link engines.

Every kind propagates to the caller unmodified; the HTTP layer maps each
one to its own status code (see ``register_exception_handlers``).
"""

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backoffice.utils.log_sanitizer import sanitize

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base exception for application errors."""

    status_code = 500
    kind = "internal-server-error"
    title = "Internal server error"

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class NotFoundError(AppError):
    """Entity absent, soft-deleted or outside the caller's account."""

    status_code = 404
    kind = "not-found"
    title = "Resource not found"

    def __init__(self, entity: str, entity_id=None, message: str = None):
        if message is None:
            message = f"{entity} '{entity_id}' was not found."
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(AppError):
    """Proceeding would violate an invariant."""

    status_code = 409
    kind = "conflict"
    title = "Resource conflict"

    def __init__(self, entity: str, entity_id, reason: str, original_error: Exception = None):
        super().__init__(f"{entity} '{entity_id}' {reason}", original_error)
        self.entity = entity
        self.entity_id = entity_id
        self.reason = reason


class ValidationError(AppError):
    """Malformed input detectable without a database round-trip."""

    status_code = 400
    kind = "validation-failed"
    title = "Validation failed"

    def __init__(self, message: str, errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.errors = errors or {}


class UnauthorizedError(AppError):
    """Storage key does not belong to the caller's account namespace."""

    status_code = 403
    kind = "forbidden"
    title = "Access forbidden"


class StorageError(AppError):
    """The blob store rejected or failed an operation."""

    status_code = 502
    kind = "storage-unavailable"
    title = "Storage backend error"


def problem_details(exc: AppError, request: Request) -> dict:
    body = {
        "type": exc.kind,
        "title": exc.title,
        "status": exc.status_code,
        "detail": exc.message,
        "instance": request.url.path,
    }
    if isinstance(exc, ValidationError) and exc.errors:
        body["errors"] = exc.errors
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "Server error occurred: %s at %s",
            sanitize(exc.message),
            sanitize(request.url.path),
            exc_info=exc,
        )
    else:
        logger.warning(
            "Client error occurred: %s at %s",
            sanitize(exc.message),
            sanitize(request.url.path),
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=problem_details(exc, request),
        media_type="application/problem+json",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
