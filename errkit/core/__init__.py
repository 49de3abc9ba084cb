"""
Core module for errkit package.

This module contains the asynchronous control-flow combinators:
- Structured error hierarchy
- Task and outcome helpers
- Retry with exponential backoff
- Timeout and cancellation overlays
- Rate-limited dispatching
- Batch processing
"""

from .exceptions import (
    ErrorCode,
    AppError,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    OperationTimeoutError,
    OperationCancelledError,
    classify_exception
)

from .task import Success, Failure, Outcome, run_task, try_catch, try_catch_sync
from .retrying import RetryConfig, retry, with_retry
from .timeouts import with_timeout, timeout
from .cancellation import CancellableHandle, with_cancel
from .rate_limiter import RateLimitConfig, RateLimiter, rate_limit, rate_limited
from .batching import BatchConfig, batch

__all__ = [
    # Exceptions
    'ErrorCode',
    'AppError',
    'ValidationError',
    'NotFoundError',
    'UnauthorizedError',
    'ForbiddenError',
    'OperationTimeoutError',
    'OperationCancelledError',
    'classify_exception',
    # Tasks
    'Success',
    'Failure',
    'Outcome',
    'run_task',
    'try_catch',
    'try_catch_sync',
    # Combinators
    'RetryConfig',
    'retry',
    'with_retry',
    'with_timeout',
    'timeout',
    'CancellableHandle',
    'with_cancel',
    'RateLimitConfig',
    'RateLimiter',
    'rate_limit',
    'rate_limited',
    'BatchConfig',
    'batch'
]
