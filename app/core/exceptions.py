"""
Application error taxonomy and the FastAPI handlers that render it.

Services raise these; routes let them propagate. Each error carries the HTTP
status it maps to and an optional data payload returned alongside the message.
"""
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class PrepWiseError(Exception):
    """Base exception for PrepWise application."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, data: Optional[Any] = None):
        self.message = message
        self.data = data
        super().__init__(message)


class ValidationError(PrepWiseError):
    """Raised when input has the wrong shape or is out of range."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(PrepWiseError):
    """Raised when an identity token cannot be verified."""

    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(PrepWiseError):
    """Raised when a resource is missing or not owned by the caller."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(PrepWiseError):
    """Raised when a write would duplicate an existing resource."""

    status_code = status.HTTP_409_CONFLICT


class InvalidStateError(PrepWiseError):
    """Raised when an operation is not allowed in the resource's current status."""

    status_code = status.HTTP_400_BAD_REQUEST


class MismatchError(PrepWiseError):
    """Raised when two referenced resources do not belong together."""

    status_code = status.HTTP_400_BAD_REQUEST


class QuestionIndexError(PrepWiseError):
    """Raised when a question index falls outside the session's question list."""

    status_code = status.HTTP_400_BAD_REQUEST


class PersistenceError(PrepWiseError):
    """Raised when a database round-trip fails."""

    pass


class UpstreamError(PrepWiseError):
    """Raised when a third-party API (LLM, LeetCode search, Google) fails."""

    pass


async def prepwise_error_handler(request: Request, exc: PrepWiseError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")

    content = {"message": exc.message}
    if exc.data is not None:
        content["data"] = jsonable_encoder(exc.data)
    return JSONResponse(status_code=exc.status_code, content=content)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]
    first = errors[0] if errors else {}
    # loc starts with where the value came from (body, query, path)
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = first.get("msg", "Invalid request")
    if field:
        message = f"{field}: {message}"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": message, "errors": errors},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error handlers to the application."""
    app.add_exception_handler(PrepWiseError, prepwise_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
