"""
Error taxonomy for the registration API.

Every domain failure is a RegistrationError carrying an HTTP status and
a stable error code. A single exception handler renders them as
``{"detail": ..., "code": ...}`` so callers can tell retryable upstream
failures from authentication, authorization and validation failures.
"""

import logging
from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorCategory:
    """Error categories with corresponding HTTP status codes."""
    VALIDATION_ERROR = ("VALIDATION_ERROR", 400)
    AUTHENTICATION_ERROR = ("AUTHENTICATION_ERROR", 401)
    AUTHORIZATION_ERROR = ("AUTHORIZATION_ERROR", 403)
    NOT_FOUND_ERROR = ("NOT_FOUND_ERROR", 404)
    CONFLICT_ERROR = ("CONFLICT_ERROR", 409)
    PAYLOAD_TOO_LARGE = ("PAYLOAD_TOO_LARGE", 413)
    RATE_LIMIT_ERROR = ("RATE_LIMIT_ERROR", 429)
    SERVER_ERROR = ("SERVER_ERROR", 500)
    BAD_GATEWAY = ("BAD_GATEWAY", 502)
    GATEWAY_TIMEOUT = ("GATEWAY_TIMEOUT", 504)


class RegistrationError(Exception):
    """Base exception for registration API errors."""

    category = ErrorCategory.SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.category[1]

    @property
    def error_code(self) -> str:
        return self.category[0]

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.error_code}


class AuthenticationError(RegistrationError):
    """Bad credentials or a missing, invalid or expired token (401)."""
    category = ErrorCategory.AUTHENTICATION_ERROR
    default_message = "Invalid or expired token"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class TokenIssueError(RegistrationError):
    default_message = "Failed to generate authentication token"


class ForbiddenError(RegistrationError):
    """Scope violation or insufficient role (403)."""
    category = ErrorCategory.AUTHORIZATION_ERROR
    default_message = "Insufficient permissions"


class TransitionNotPermitted(ForbiddenError):
    default_message = "Your role may not perform this status change"


class NotFoundError(RegistrationError):
    category = ErrorCategory.NOT_FOUND_ERROR
    default_message = "Resource not found"


class ConflictError(RegistrationError):
    category = ErrorCategory.CONFLICT_ERROR
    default_message = "Resource already exists"


class InvalidStatusTransition(ConflictError):
    default_message = "Invalid status transition"


class BusinessRuleViolation(RegistrationError):
    category = ErrorCategory.VALIDATION_ERROR
    default_message = "Registration violates tournament rules"


class InvalidFigId(BusinessRuleViolation):
    default_message = "FIG ID is required"


# Upstream (FIG) failures


class UpstreamError(RegistrationError):
    category = ErrorCategory.BAD_GATEWAY
    default_message = "Failed to fetch data from FIG"


class BadGatewayError(UpstreamError):
    pass


class ImageNotFound(UpstreamError):
    category = ErrorCategory.NOT_FOUND_ERROR
    default_message = "Image not found on FIG servers"


class UpstreamRateLimited(UpstreamError):
    category = ErrorCategory.RATE_LIMIT_ERROR
    default_message = "FIG rate limit exceeded, retry later"


class ImageTooLarge(UpstreamError):
    category = ErrorCategory.PAYLOAD_TOO_LARGE
    default_message = "Image exceeds the maximum allowed size"


class UpstreamTimeout(UpstreamError):
    category = ErrorCategory.GATEWAY_TIMEOUT
    default_message = "Timed out waiting for FIG"


async def registration_error_handler(request: Request, exc: RegistrationError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RegistrationError, registration_error_handler)
