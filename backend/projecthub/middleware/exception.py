"""
Global Exception Handlers

Application exception hierarchy, translation of raw backend failures into
friendly errors, and the FastAPI handlers that render them. Every error body
has the same shape::

    {"error": code, "message": str, "details": {...}, "toast": {"level", "message"}}
"""

import asyncio
import traceback
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    NoResultFound,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from projecthub.core.config import settings
from projecthub.core.errors import log_error
from projecthub.core.logging import get_logger

logger = get_logger(__name__)


class AppException(Exception):
    """Base application exception."""

    toast_level = "error"

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or f"ERR_{status_code}"
        self.details = details or {}


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, resource: str, resource_id: Optional[str] = None) -> None:
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="ERR_NOT_FOUND",
            details={"resource": resource, "resource_id": resource_id},
        )


class ConflictException(AppException):
    """Resource conflict exception."""

    def __init__(self, message: str) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code="ERR_CONFLICT",
        )


class UnauthorizedException(AppException):
    """Missing or unusable session."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="ERR_UNAUTHORIZED",
        )


class ForbiddenException(AppException):
    """The session is valid but may not touch the resource."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="ERR_FORBIDDEN",
        )


class ValidationException(AppException):
    """Input rejected before reaching any data access."""

    toast_level = "warning"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="ERR_VALIDATION",
            details=details,
        )


class BackendError(AppException):
    """A backend failure translated into a user-facing message."""

    def __init__(
        self,
        message: str,
        error_code: str = "ERR_BACKEND",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        retryable: bool = False,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details={"retryable": retryable},
        )
        self.retryable = retryable


class RedirectRequired(Exception):
    """Raised when the session resolver decides the client must go elsewhere."""

    def __init__(self, location: str) -> None:
        super().__init__(location)
        self.location = location


# =============================================================================
# Backend error translation
# =============================================================================

NETWORK_MARKERS = ("network", "connection", "connect", "offline", "unreachable")


def is_network_error(error: BaseException) -> bool:
    if isinstance(error, (ConnectionError, PoolTimeoutError)):
        return True
    if isinstance(error, DBAPIError) and error.connection_invalidated:
        return True
    text = str(error).lower()
    return any(marker in text for marker in NETWORK_MARKERS)


def is_timeout_error(error: BaseException) -> bool:
    if isinstance(error, (asyncio.TimeoutError, TimeoutError, PoolTimeoutError)):
        return True
    return "timeout" in str(error).lower() or "timed out" in str(error).lower()


def classify_backend_error(error: BaseException) -> BackendError:
    """
    Map a raw backend exception onto a friendly :class:`BackendError`.

    Constraint violations and permission problems are never retryable;
    connectivity and timeout failures are.
    """
    if isinstance(error, BackendError):
        return error

    text = str(error).lower()

    if isinstance(error, IntegrityError):
        if "unique" in text or "duplicate" in text:
            message = "This record already exists. Please use a different value."
            if "email" in text:
                message = "This email is already registered."
            return BackendError(message, "ERR_DUPLICATE", status.HTTP_409_CONFLICT)
        if "foreign key" in text:
            return BackendError(
                "Cannot delete: this item has related data that must be removed first.",
                "ERR_REFERENCE",
                status.HTTP_409_CONFLICT,
            )
        return BackendError(
            "The change violates a data constraint.",
            "ERR_CONSTRAINT",
            status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(error, NoResultFound):
        return BackendError(
            "The requested item was not found.",
            "ERR_NOT_FOUND",
            status.HTTP_404_NOT_FOUND,
        )

    if "permission denied" in text or "insufficient privilege" in text:
        return BackendError(
            "You don't have permission to perform this action.",
            "ERR_PERMISSION",
            status.HTTP_403_FORBIDDEN,
        )

    if is_timeout_error(error):
        return BackendError(
            "Request timed out. Please try again.",
            "ERR_TIMEOUT",
            status.HTTP_504_GATEWAY_TIMEOUT,
            retryable=True,
        )

    if is_network_error(error) or isinstance(error, OperationalError):
        return BackendError(
            "Connection lost. Please check your connection and try again.",
            "ERR_NETWORK",
            status.HTTP_503_SERVICE_UNAVAILABLE,
            retryable=True,
        )

    return BackendError("An unexpected error occurred. Please try again.")


def should_retry(error: BaseException) -> bool:
    """Only connectivity, timeout and server-side failures are worth retrying."""
    if isinstance(error, BackendError):
        return error.retryable
    if isinstance(error, (IntegrityError, AppException)):
        return False
    return classify_backend_error(error).retryable


# =============================================================================
# Handlers
# =============================================================================

def error_body(
    error_code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    toast_level: str = "error",
) -> Dict[str, Any]:
    return {
        "error": error_code,
        "message": message,
        "details": details or {},
        "toast": {"level": toast_level, "message": message},
    }


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Set up global exception handlers for the application.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(RedirectRequired)
    async def handle_redirect(request: Request, exc: RedirectRequired) -> RedirectResponse:
        logger.info("Redirecting", path=request.url.path, location=exc.location)
        return RedirectResponse(exc.location, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    @app.exception_handler(AppException)
    async def handle_app_exception(request: Request, exc: AppException) -> JSONResponse:
        logger.warning(
            f"Application exception: {exc.message}",
            error_code=exc.error_code,
            status_code=exc.status_code,
            path=request.url.path,
        )
        if exc.status_code >= 500:
            log_error(exc, page=request.url.path, action=request.method)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.error_code, exc.message, exc.details, exc.toast_level),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        logger.warning("Request validation error", path=request.url.path)
        errors = [
            {
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=error_body(
                "ERR_VALIDATION",
                "Request validation failed",
                {"errors": errors},
                toast_level="warning",
            ),
        )

    @app.exception_handler(ValidationError)
    async def handle_pydantic_validation_error(
        request: Request,
        exc: ValidationError,
    ) -> JSONResponse:
        logger.warning("Pydantic validation error", path=request.url.path)
        errors = [
            {"field": ".".join(str(loc) for loc in error["loc"]), "message": error["msg"]}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(
                "ERR_VALIDATION",
                "Validation failed",
                {"errors": errors},
                toast_level="warning",
            ),
        )

    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(
        request: Request,
        exc: SQLAlchemyError,
    ) -> JSONResponse:
        friendly = classify_backend_error(exc)
        log_error(exc, page=request.url.path, action=request.method)
        return JSONResponse(
            status_code=friendly.status_code,
            content=error_body(friendly.error_code, friendly.message, friendly.details),
        )

    @app.exception_handler(Exception)
    async def handle_generic_exception(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        log_error(
            exc,
            page=request.url.path,
            action=request.method,
            traceback=traceback.format_exc(),
        )
        message = "Internal server error"
        if settings.is_development:
            message = str(exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("ERR_INTERNAL", message),
        )
