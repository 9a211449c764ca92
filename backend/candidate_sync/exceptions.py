"""
Custom exceptions and error handlers for the sync service.
"""
import logging
from typing import Any, Optional
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "Your session expired. Please sign in again."


class ServiceException(Exception):
    """Base exception for service layer errors."""
    pass


class ApiError(ServiceException):
    """Raised when the remote candidate API answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int = 0, data: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.data = data


class SessionExpiredError(ApiError):
    """Raised on HTTP 401. Aborts whatever pass is in progress."""

    def __init__(self, message: str = SESSION_EXPIRED_MESSAGE, data: Any = None):
        super().__init__(message, status_code=401, data=data)
        # Filled by the sync executor when a pass is aborted midway
        self.partial_result = None


class RemoteUnavailableError(ServiceException):
    """Raised when the remote API cannot be reached at all."""
    pass


class ProfileValidationError(ServiceException):
    """Raised when the local document fails pre-flight validation."""

    def __init__(self, validation):
        super().__init__(validation.first_message or "Please fill in all required fields.")
        self.validation = validation


class SaveInProgressError(ServiceException):
    """Raised when a save is requested while another save is still running."""
    pass


class InvalidParseTransitionError(ServiceException):
    """Raised when a parse cycle is started or retried from a state that forbids it."""
    pass


def _error_body(exc: Exception, extra: Optional[dict] = None) -> dict:
    body = {
        "success": False,
        "error": str(exc),
        "type": exc.__class__.__name__,
    }
    if extra:
        body.update(extra)
    return body


async def service_exception_handler(
    request: Request,
    exc: ServiceException
) -> JSONResponse:
    """
    Handle service layer exceptions.

    Args:
        request: The FastAPI request.
        exc: The service exception.

    Returns:
        JSONResponse with error details.
    """
    status_code = 500
    extra = None
    if isinstance(exc, SessionExpiredError):
        status_code = 401
    elif isinstance(exc, ProfileValidationError):
        status_code = 422
        extra = {
            "errors": exc.validation.errors,
            "first_error_id": exc.validation.first_error_id,
        }
    elif isinstance(exc, (SaveInProgressError, InvalidParseTransitionError)):
        status_code = 409
    elif isinstance(exc, (ApiError, RemoteUnavailableError)):
        status_code = 502

    if status_code >= 500:
        logger.error(f"Service error in {request.url.path}: {exc}", exc_info=True)
    else:
        logger.warning(f"Service error in {request.url.path}: {exc}")

    return JSONResponse(status_code=status_code, content=_error_body(exc, extra))


async def document_validation_handler(
    request: Request,
    exc: ValidationError
) -> JSONResponse:
    """A document patch that leaves a section invalid is the caller's mistake."""
    logger.warning(f"Invalid document in {request.url.path}: {exc.error_count()} errors")
    return JSONResponse(
        status_code=422,
        content=_error_body(exc, {"errors": jsonable_encoder(exc.errors(include_url=False))}),
    )
