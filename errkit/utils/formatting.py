import os
import traceback
from typing import Any, Dict, Optional

from ..core.exceptions import AppError, ErrorCode


def _stack_enabled(include_stack: Optional[bool]) -> bool:
    if include_stack is not None:
        return include_stack
    return os.getenv("ERRKIT_ENV") == "development"


def _format_stack(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


def format_error(error: BaseException, include_stack: Optional[bool] = None) -> Dict[str, Any]:
    """
    Format an error for logging or a response body.

    Args:
        error: Any exception
        include_stack: Force the traceback on or off. When None, it is
            included only if ERRKIT_ENV is "development".

    Returns:
        Dict with message, code, status_code, details (AppError only) and stack
    """
    stack = _format_stack(error) if _stack_enabled(include_stack) else None

    if isinstance(error, AppError):
        return {
            "message": error.message,
            "code": str(error.code.value if isinstance(error.code, ErrorCode) else error.code),
            "status_code": error.status_code,
            "details": error.details or {},
            "stack": stack
        }

    return {
        "message": str(error) or "Unknown error occurred",
        "code": ErrorCode.INTERNAL_ERROR.value,
        "status_code": 500,
        "stack": stack
    }
