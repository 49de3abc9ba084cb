# Core combinators and error hierarchy
from .core.exceptions import (
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
from .core.task import Success, Failure, Outcome, try_catch, try_catch_sync
from .core.retrying import RetryConfig, retry, with_retry
from .core.timeouts import with_timeout, timeout
from .core.cancellation import CancellableHandle, with_cancel
from .core.rate_limiter import RateLimitConfig, RateLimiter, rate_limit, rate_limited
from .core.batching import BatchConfig, batch

# Formatting and handler registration
from .utils import (
    format_error,
    ErrorOrigin,
    GlobalErrorHandlers,
    setup_global_error_handlers,
    with_error_handling,
    log_retry
)

# Framework integrations
from . import apis
