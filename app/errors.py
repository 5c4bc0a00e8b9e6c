import logging
import traceback
from typing import Callable

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.requests import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("complaintdesk.errors")

GENERIC_ERROR_MESSAGE = "Internal server error"


class ComplaintDeskException(Exception):
    """Base class for all complaint desk exceptions."""

    def __init__(self, message: str = "An error occurred", error_code: str = "error"):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class DatabaseError(ComplaintDeskException):
    """A database operation failed."""
    def __init__(self, message: str = "Database error occurred"):
        super().__init__(message=message, error_code="database_error")


class StorageError(ComplaintDeskException):
    """The object storage service could not fulfil a request."""
    def __init__(self, message: str = "Storage error occurred"):
        super().__init__(message=message, error_code="storage_error")


class InvalidToken(ComplaintDeskException):
    """User has provided an invalid or expired token."""
    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message=message, error_code="invalid_token")


class UnAuthenticated(ComplaintDeskException):
    """User is not authenticated."""
    def __init__(self, message: str = "Access token required"):
        super().__init__(message=message, error_code="unauthenticated")


class InvalidCredentials(ComplaintDeskException):
    """User has provided incorrect login details."""
    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message, error_code="invalid_credentials")


class InsufficientPermission(ComplaintDeskException):
    """User does not have the necessary permissions to perform an action."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message=message, error_code="insufficient_permissions")


class ComplaintNotFound(ComplaintDeskException):
    def __init__(self, message: str = "Complaint not found"):
        super().__init__(message=message, error_code="complaint_not_found")


class AccountNotFound(ComplaintDeskException):
    def __init__(self, message: str = "User not found"):
        super().__init__(message=message, error_code="account_not_found")


class DataValidationError(ComplaintDeskException):
    """Input failed a check that cannot be expressed in a request schema."""
    def __init__(self, message: str = "Validation failed", details: list | None = None):
        super().__init__(message=message, error_code="data_validation_error")
        self.details = details or []


class AttachmentLimitExceeded(ComplaintDeskException):
    def __init__(self, message: str = "Attachment limit reached for this complaint"):
        super().__init__(message=message, error_code="attachment_limit_exceeded")


class RateLimitExceeded(ComplaintDeskException):
    """The client has exceeded the rate limit."""
    def __init__(self, message: str = "Too many requests from this IP, please try again later.", retry_after: int = 0):
        super().__init__(message=message, error_code="rate_limit_exceeded")
        self.retry_after = retry_after


def error_response(status_code: int, message: str, details: list | None = None, headers: dict | None = None) -> JSONResponse:
    content = {"success": False, "error": message}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def create_exception_handler(
    status_code: int,
    initial_detail: str = "An unexpected error occurred",
) -> Callable[[Request, ComplaintDeskException], JSONResponse]:

    async def exception_handler(request: Request, exc: ComplaintDeskException):
        if status_code >= 500:
            logger.error(
                f"{exc.__class__.__name__} at {request.method} {request.url.path}: {exc.message}"
            )
            return error_response(status_code, GENERIC_ERROR_MESSAGE)
        return error_response(status_code, exc.message or initial_detail)

    return exception_handler


def format_validation_errors(errors) -> list[dict]:
    """Flatten pydantic errors into (field, message) pairs."""
    details = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        details.append({
            "field": ".".join(location) or "body",
            "message": error.get("msg", "Invalid value"),
        })
    return details


def register_all_errors(app: FastAPI):
    """Registers all exception handlers in the FastAPI app."""

    app.add_exception_handler(
        DatabaseError,
        create_exception_handler(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error occurred"),
    )

    app.add_exception_handler(
        StorageError,
        create_exception_handler(status.HTTP_500_INTERNAL_SERVER_ERROR, "Storage error occurred"),
    )

    app.add_exception_handler(
        InvalidToken,
        create_exception_handler(status.HTTP_401_UNAUTHORIZED, "Invalid or expired token"),
    )

    app.add_exception_handler(
        UnAuthenticated,
        create_exception_handler(status.HTTP_401_UNAUTHORIZED, "Access token required"),
    )

    app.add_exception_handler(
        InvalidCredentials,
        create_exception_handler(status.HTTP_401_UNAUTHORIZED, "Invalid credentials"),
    )

    app.add_exception_handler(
        InsufficientPermission,
        create_exception_handler(status.HTTP_403_FORBIDDEN, "Insufficient permissions"),
    )

    app.add_exception_handler(
        ComplaintNotFound,
        create_exception_handler(status.HTTP_404_NOT_FOUND, "Complaint not found"),
    )

    app.add_exception_handler(
        AccountNotFound,
        create_exception_handler(status.HTTP_404_NOT_FOUND, "User not found"),
    )

    app.add_exception_handler(
        AttachmentLimitExceeded,
        create_exception_handler(status.HTTP_400_BAD_REQUEST, "Attachment limit reached"),
    )

    @app.exception_handler(DataValidationError)
    async def data_validation_error(request: Request, exc: DataValidationError):
        return error_response(status.HTTP_400_BAD_REQUEST, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if any(error.get("type") == "json_invalid" for error in errors):
            return error_response(status.HTTP_400_BAD_REQUEST, "Malformed request body")
        logger.info(f"Validation error at {request.method} {request.url.path}: {errors}")
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "Validation failed",
            format_validation_errors(errors),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
            message = f"Route {request.url.path} not found"
        return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(SQLAlchemyError)
    async def database_error(request: Request, exc: SQLAlchemyError):
        logger.error(f"Database error at {request.method} {request.url.path}: {str(exc)}")
        logger.error(traceback.format_exc())
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception at {request.method} {request.url.path}: {str(exc)}")
        logger.error(traceback.format_exc())
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)
