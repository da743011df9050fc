"""
Error taxonomy and FastAPI exception handlers.

Every failure in the request path is raised as an ``AroundError``
subclass. Handlers registered here turn them into an HTTP status with a
``{"detail": ...}`` body and a logged diagnostic:

- ValidationError -> 400 (malformed or missing input, no side effects)
- ConflictError   -> 400 (duplicate username)
- AuthError       -> 401 (bad credentials, missing/invalid/expired token)
- AdapterError    -> 500 (record store, blob store or scoring failure)
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from around.core.logging import get_logger

logger = get_logger(__name__)


class AroundError(Exception):
    """Base class for errors surfaced to clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AroundError):
    """Malformed or missing required input."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class ConflictError(AroundError):
    """Resource already exists."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "conflict"


class AuthError(AroundError):
    """Invalid credentials or token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"


class AdapterError(AroundError):
    """Failure of an external collaborator."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "adapter_error"

    def __init__(self, message: str, timed_out: bool = False):
        super().__init__(message)
        # The remote side may still have applied the call
        self.timed_out = timed_out


class RecordStoreError(AdapterError):
    code = "record_store_error"


class BlobStoreError(AdapterError):
    code = "blob_store_error"


class ScoringError(AdapterError):
    code = "scoring_error"


async def around_error_handler(request: Request, exc: AroundError) -> JSONResponse:
    log = logger.error if isinstance(exc, AdapterError) else logger.warning
    log(
        "request_failed",
        error_code=exc.code,
        error=exc.message,
        path=request.url.path,
        method=request.method,
    )

    headers = None
    if isinstance(exc, AuthError):
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies and query strings are client errors (400)."""
    logger.warning(
        "request_validation_failed",
        path=request.url.path,
        errors=exc.errors(),
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request parameters"},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception",
        error=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An unexpected error occurred"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AroundError, around_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
