"""
Standardized error handling for the SuperArticles API.

Every error leaves the API in one envelope:

    {"error": {"code": "...", "message": "...", "field": "...", "details": {...}},
     "request_id": "..."}

Unhandled exceptions collapse to a generic INTERNAL_ERROR; the exception
text is only attached when DEBUG is on.
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_VALUE = "INVALID_VALUE"

    # Authentication/Authorization (401/403)
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_SECURITY_CODE = "INVALID_SECURITY_CODE"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    RATE_LIMITED = "RATE_LIMITED"

    # Resource errors (404/409)
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    DUPLICATE = "DUPLICATE"
    CONFLICT = "CONFLICT"
    INVALID_TRANSITION = "INVALID_TRANSITION"

    # External services
    NOTIFICATION_ERROR = "NOTIFICATION_ERROR"

    # Server errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"


# =============================================================================
# Error Response Schema
# =============================================================================

@dataclass
class ErrorDetail:
    """Detailed error information."""
    code: ErrorCode
    message: str
    field: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "code": self.code.value if isinstance(self.code, ErrorCode) else self.code,
            "message": self.message,
        }
        if self.field:
            result["field"] = self.field
        if self.details:
            result["details"] = self.details
        return result


@dataclass
class ErrorResponse:
    """Standardized error response."""
    error: ErrorDetail
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error.to_dict(),
            "request_id": self.request_id,
        }

    def to_response(self, status_code: int = 400) -> Response:
        return Response(self.to_dict(), status=status_code)


# =============================================================================
# Custom Exceptions
# =============================================================================

class PlatformException(APIException):
    """Base exception for SuperArticles API errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCode.INTERNAL_ERROR
    default_detail = "An error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message or self.default_detail
        self.error_code = code or self.error_code
        self.field = field
        self.error_details = details or {}

        if status_code:
            self.status_code = status_code

        super().__init__(detail=self.message)

    def get_error_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        return ErrorResponse(
            error=ErrorDetail(
                code=self.error_code,
                message=self.message,
                field=self.field,
                details=self.error_details if self.error_details else None,
            ),
            request_id=request_id or str(uuid.uuid4()),
        )


class ValidationError(PlatformException):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCode.VALIDATION_ERROR
    default_detail = "Validation failed"


class AuthenticationFailedError(PlatformException):
    """Rejected credentials: unknown member, bad or consumed security code."""
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = ErrorCode.INVALID_CREDENTIALS
    default_detail = "Invalid credentials"


class PermissionDeniedError(PlatformException):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = ErrorCode.PERMISSION_DENIED
    default_detail = "Permission denied"


class NotFoundError(PlatformException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = ErrorCode.NOT_FOUND
    default_detail = "Resource not found"


class DuplicateError(PlatformException):
    status_code = status.HTTP_409_CONFLICT
    error_code = ErrorCode.DUPLICATE
    default_detail = "Resource already exists"


class ConflictError(PlatformException):
    """A compare-and-set update lost against a concurrent change."""
    status_code = status.HTTP_409_CONFLICT
    error_code = ErrorCode.CONFLICT
    default_detail = "Resource was modified concurrently"


class RateLimitedError(PlatformException):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error_code = ErrorCode.RATE_LIMITED
    default_detail = "Too many requests, please try again later"


class NotificationError(PlatformException):
    """The email gateway refused or failed to deliver a message."""
    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = ErrorCode.NOTIFICATION_ERROR
    default_detail = "Failed to send email"


# =============================================================================
# Exception Handler
# =============================================================================

def get_request_id(request) -> str:
    """Get or generate request ID from request."""
    if hasattr(request, 'request_id'):
        return request.request_id
    return str(uuid.uuid4())


def _code_for_status(status_code: int) -> ErrorCode:
    if status_code == 401:
        return ErrorCode.AUTHENTICATION_REQUIRED
    if status_code == 403:
        return ErrorCode.PERMISSION_DENIED
    if status_code == 404:
        return ErrorCode.NOT_FOUND
    if status_code == 405:
        return ErrorCode.METHOD_NOT_ALLOWED
    if status_code == 429:
        return ErrorCode.RATE_LIMITED
    if status_code >= 500:
        return ErrorCode.INTERNAL_ERROR
    return ErrorCode.VALIDATION_ERROR


def platform_exception_handler(exc, context):
    """
    DRF exception handler converting every exception to the error envelope.
    """
    request = context.get('request')
    request_id = get_request_id(request) if request else str(uuid.uuid4())

    if isinstance(exc, PlatformException):
        logger.warning(
            "API error %s: %s", exc.error_code.value, exc.message,
            extra={
                "error_code": exc.error_code.value,
                "field": exc.field,
                "status_code": exc.status_code,
            }
        )
        return exc.get_error_response(request_id).to_response(exc.status_code)

    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, 'message_dict'):
            details = exc.message_dict
            message = "Validation failed"
        else:
            details = {"errors": exc.messages}
            message = exc.messages[0] if exc.messages else "Validation failed"

        return ErrorResponse(
            error=ErrorDetail(
                code=ErrorCode.VALIDATION_ERROR,
                message=message,
                details=details,
            ),
            request_id=request_id,
        ).to_response(status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, Http404):
        return ErrorResponse(
            error=ErrorDetail(
                code=ErrorCode.NOT_FOUND,
                message=str(exc) if str(exc) else "Resource not found",
            ),
            request_id=request_id,
        ).to_response(status.HTTP_404_NOT_FOUND)

    # Standard DRF exceptions (auth, throttling, parse errors, serializer errors)
    response = drf_exception_handler(exc, context)

    if response is not None:
        if isinstance(response.data, dict):
            if 'detail' in response.data:
                message = str(response.data['detail'])
                details = None
            else:
                message = "Validation failed"
                details = response.data
        elif isinstance(response.data, list):
            message = str(response.data[0]) if response.data else "Error"
            details = {"errors": response.data}
        else:
            message = str(response.data)
            details = None

        error_response = ErrorResponse(
            error=ErrorDetail(
                code=_code_for_status(response.status_code),
                message=message,
                details=details,
            ),
            request_id=request_id,
        ).to_response(response.status_code)
        # Keep headers such as Retry-After and WWW-Authenticate
        for header, value in response.items():
            error_response[header] = value
        return error_response

    logger.exception(
        "Unhandled exception: %s", type(exc).__name__,
        extra={"exception_type": type(exc).__name__},
    )

    details = None
    if settings.DEBUG:
        details = {"exception": type(exc).__name__, "message": str(exc)}

    return ErrorResponse(
        error=ErrorDetail(
            code=ErrorCode.INTERNAL_ERROR,
            message="Internal server error",
            details=details,
        ),
        request_id=request_id,
    ).to_response(status.HTTP_500_INTERNAL_SERVER_ERROR)
