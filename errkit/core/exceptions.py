"""
Structured error hierarchy for errkit package.

This module defines the error types shared by the combinators and the
integrations, each carrying a classification code and an HTTP-style
status code so callers can decide how to report a failure.
"""

import asyncio
from enum import Enum
from typing import Optional, Dict, Any

import aiohttp


class ErrorCode(str, Enum):
    """Classification codes carried by AppError instances."""
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    TIMEOUT = "TIMEOUT"            # Deadline exceeded
    CANCELLED = "CANCELLED"        # Result suppressed by cancellation


class AppError(Exception):
    """Base exception class for all errkit-related errors."""

    def __init__(self, message: str, code: str = ErrorCode.INTERNAL_ERROR,
                 status_code: int = 500, is_operational: bool = True,
                 details: Optional[Dict[str, Any]] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.is_operational = is_operational
        self.details = details
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self):
        base_msg = super().__str__()
        if self.cause:
            return f"{base_msg} (caused by: {self.cause})"
        return base_msg


class ValidationError(AppError):
    """Invalid input supplied by the caller."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(
            message,
            code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details,
            cause=cause
        )


class NotFoundError(AppError):
    """Requested resource does not exist."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(
            message,
            code=ErrorCode.NOT_FOUND,
            status_code=404,
            details=details,
            cause=cause
        )


class UnauthorizedError(AppError):
    """Missing or invalid credentials."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(
            message,
            code=ErrorCode.UNAUTHORIZED,
            status_code=401,
            details=details,
            cause=cause
        )


class ForbiddenError(AppError):
    """Credentials are valid but not sufficient."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(
            message,
            code=ErrorCode.FORBIDDEN,
            status_code=403,
            details=details,
            cause=cause
        )


class OperationTimeoutError(AppError):
    """
    Deadline exceeded before the wrapped task settled.

    Raised by with_timeout. The wrapped task is not stopped, only
    its outcome is discarded.
    """

    def __init__(self, message: str = "Operation timed out",
                 timeout: Optional[float] = None, **kwargs):
        super().__init__(
            message,
            code=ErrorCode.TIMEOUT,
            status_code=408,
            **kwargs
        )
        self.timeout = timeout


class OperationCancelledError(AppError):
    """
    Result suppressed because the caller cancelled the operation.

    Note that this is not asyncio.CancelledError: it is an ordinary
    failure delivered in place of the task's real outcome.
    """

    def __init__(self, message: str = "Operation was cancelled", **kwargs):
        super().__init__(
            message,
            code=ErrorCode.CANCELLED,
            status_code=499,
            **kwargs
        )


_STATUS_ERRORS = {
    400: ValidationError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
}


def classify_exception(exc: BaseException) -> AppError:
    """
    Classify a generic exception into appropriate AppError type.

    Args:
        exc: The original exception to classify

    Returns:
        AppError: Classified exception with code and status code
    """
    if isinstance(exc, AppError):
        return exc

    # Timeouts, both asyncio deadlines and aiohttp socket timeouts
    if isinstance(exc, (asyncio.TimeoutError, aiohttp.ServerTimeoutError)):
        return OperationTimeoutError("Request timeout", cause=exc)

    if isinstance(exc, asyncio.CancelledError):
        return OperationCancelledError(cause=exc)

    # Upstream HTTP errors keep their status code
    if isinstance(exc, aiohttp.ClientResponseError):
        if exc.status in _STATUS_ERRORS:
            return _STATUS_ERRORS[exc.status](f"Upstream error: {exc.status}", cause=exc)
        if exc.status == 408:
            return OperationTimeoutError(f"Upstream error: {exc.status}", cause=exc)
        return AppError(
            f"Upstream error: {exc.status}",
            code="UPSTREAM_ERROR",
            status_code=exc.status,
            cause=exc
        )

    # Network connectivity issues
    if isinstance(exc, (aiohttp.ClientConnectionError, ConnectionError)):
        return AppError(
            "Connection failed",
            code="CONNECTION_ERROR",
            status_code=503,
            cause=exc
        )

    # Default: programming errors and anything unknown
    return AppError(
        str(exc) or "Unknown error occurred",
        is_operational=False,
        cause=exc
    )
