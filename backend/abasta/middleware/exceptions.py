"""Application exceptions and the handlers that turn them into responses.

Every error leaves the API in the standard envelope:

    {
        "success": false,
        "message": "Human-readable message",
        "data": null | {...},
        "timestamp": "2025-12-07T14:23:59.123456"
    }

Services raise the typed errors below at the point of detection; the
handlers map the error kind to an HTTP status. Nothing is retried.
"""

import logging
import traceback
from datetime import datetime
from typing import Any, Union

from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("abasta.errors")


class AbastaError(Exception):
    """Base exception for Abasta application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(self.message)


class ResourceNotFoundError(AbastaError):
    """A referenced entity does not exist."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="RESOURCE_NOT_FOUND",
        )


class DuplicateResourceError(AbastaError):
    """A uniqueness rule would be violated."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code="DUPLICATE_RESOURCE",
        )


class BadRequestError(AbastaError):
    """The request is well-formed but not acceptable in the current state."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="BAD_REQUEST",
        )


class IllegalStateError(AbastaError):
    """An operation is not allowed from the entity's current status."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code="ILLEGAL_STATE",
        )


class NotificationError(AbastaError):
    """The email collaborator failed to deliver a message."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_502_BAD_GATEWAY,
            error_code="NOTIFICATION_FAILED",
        )
        self.__cause__ = cause


class PermissionDeniedError(AbastaError):
    """The caller may not act on this resource."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="PERMISSION_DENIED",
        )


def create_error_response(
    status_code: int,
    message: str,
    data: Any = None,
    headers: dict | None = None,
) -> JSONResponse:
    """Create an error response in the standard envelope."""
    content = {
        "success": False,
        "message": message,
        "data": data,
        "timestamp": datetime.utcnow().isoformat(),
    }
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content),
        headers=headers,
    )


async def abasta_exception_handler(
    request: Request,
    exc: AbastaError,
) -> JSONResponse:
    """Handle typed application errors."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "%s on %s %s: %s",
        exc.error_code,
        request.method,
        request.url.path,
        exc.message,
    )
    return create_error_response(
        status_code=exc.status_code,
        message=exc.message,
    )


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException],
) -> JSONResponse:
    """Handle FastAPI HTTP exceptions (401 from the bearer scheme, 404 routes, ...)."""
    if exc.status_code >= 500:
        logger.error(
            "HTTP %s on %s %s: %s",
            exc.status_code,
            request.method,
            request.url.path,
            exc.detail,
        )

    return create_error_response(
        status_code=exc.status_code,
        message=str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: Union[RequestValidationError, ValidationError],
) -> JSONResponse:
    """Handle pydantic validation errors as a field → message map."""
    errors: dict[str, str] = {}
    for error in exc.errors():
        # Drop the "body"/"query" prefix so keys read like field names
        loc = [str(part) for part in error["loc"] if part not in ("body", "query", "path")]
        field = ".".join(loc) or "request"
        errors.setdefault(field, error["msg"])

    logger.warning(
        "Validation error on %s %s: %s",
        request.method,
        request.url.path,
        errors,
    )

    return create_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        message="Validation error",
        data=errors,
    )


async def database_exception_handler(
    request: Request,
    exc: IntegrityError,
) -> JSONResponse:
    """Handle database integrity errors that slipped past service checks."""
    logger.error(
        "Database integrity error on %s %s: %s",
        request.method,
        request.url.path,
        exc.orig if hasattr(exc, "orig") else exc,
    )

    error_msg = str(exc.orig) if hasattr(exc, "orig") else str(exc)
    if "unique" in error_msg.lower():
        return create_error_response(
            status_code=status.HTTP_409_CONFLICT,
            message="A record with this value already exists",
        )

    return create_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        message="Database constraint violation",
    )


async def operational_exception_handler(
    request: Request,
    exc: OperationalError,
) -> JSONResponse:
    """Handle database operational errors (connection issues, etc.)."""
    logger.error(
        "Database operational error on %s %s: %s",
        request.method,
        request.url.path,
        exc,
    )

    return create_error_response(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        message="Database temporarily unavailable. Please try again.",
    )


async def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle all other unhandled exceptions."""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        extra={"traceback": traceback.format_exc()},
        exc_info=True,
    )

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message=f"Internal server error: {exc}",
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(AbastaError, abasta_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, database_exception_handler)
    app.add_exception_handler(OperationalError, operational_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
