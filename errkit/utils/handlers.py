"""
Error-handling wrappers and process-level handler registration.

The global registry is an explicit subscription point: a single handler is
registered once and receives every uncaught failure together with its
origin. Hooks into the interpreter and the event loop are installed
separately, so the dispatch path can be exercised directly in tests.
"""

import asyncio
import functools
import inspect
import sys
from enum import Enum
from typing import Any, Callable, Optional

from tqdm import tqdm

from ..core.exceptions import AppError


class ErrorOrigin(Enum):
    """Where an uncaught failure came from."""
    UNCAUGHT_EXCEPTION = "uncaught_exception"    # Synchronous, reached sys.excepthook
    UNHANDLED_ASYNC = "unhandled_async"          # Reported by the event loop


ErrorHandler = Callable[[BaseException, ErrorOrigin], Any]


def with_error_handling(fn: Callable, error_handler: Callable[[Exception], Any]) -> Callable:
    """
    Wrap a function so failures go to error_handler instead of the caller.

    Works for both sync and async functions. The wrapped call returns None
    when the function raised.
    """
    if inspect.iscoroutinefunction(fn):
        @functools.wraps(fn)
        async def async_wrapper(*args, **kwargs):
            try:
                return await fn(*args, **kwargs)
            except Exception as exc:
                error_handler(exc)
                return None
        return async_wrapper

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except Exception as exc:
            error_handler(exc)
            return None
    return wrapper


def log_retry(attempt: int, error: Exception) -> None:
    """Retry observer reporting each failed attempt on the console."""
    tqdm.write(f"{type(error).__name__} encountered: {error}. Retrying after attempt {attempt}...")


class GlobalErrorHandlers:
    """
    Registration point for the process-wide failure handler.

    Features:
    - One handler, set once for the lifetime of the registry
    - Direct dispatch for tests and custom integrations
    - Optional hooks into sys.excepthook and an event loop's exception handler
    """

    def __init__(self):
        self.handler: Optional[ErrorHandler] = None
        self._previous_excepthook = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._previous_loop_handler = None

    @property
    def installed(self) -> bool:
        return self._previous_excepthook is not None

    def register(self, handler: ErrorHandler) -> None:
        """Register the handler. A second registration raises RuntimeError."""
        if self.handler is not None:
            raise RuntimeError("A global error handler is already registered")
        self.handler = handler

    def dispatch(self, error: Any, origin: ErrorOrigin) -> None:
        """
        Deliver a failure to the registered handler.

        Payloads that are not exceptions are wrapped into an AppError.
        """
        if self.handler is None:
            raise RuntimeError("No global error handler is registered")
        if not isinstance(error, BaseException):
            error = AppError(str(error))
        self.handler(error, origin)

    def install(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """
        Hook the registry into sys.excepthook and the event loop.

        Args:
            loop: Loop whose exception handler to replace, defaults to the
                running loop if there is one

        Raises:
            RuntimeError: If no handler has been registered yet
        """
        if self.handler is None:
            raise RuntimeError("Register a handler before installing the hooks")
        if self.installed:
            return
        self._previous_excepthook = sys.excepthook
        sys.excepthook = self._excepthook

        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
        if loop is not None:
            self._loop = loop
            self._previous_loop_handler = loop.get_exception_handler()
            loop.set_exception_handler(self._loop_exception_handler)

    def uninstall(self) -> None:
        """Restore the hooks replaced by install()."""
        if not self.installed:
            return
        sys.excepthook = self._previous_excepthook
        self._previous_excepthook = None
        if self._loop is not None:
            self._loop.set_exception_handler(self._previous_loop_handler)
            self._loop = None
            self._previous_loop_handler = None

    def _excepthook(self, exc_type, exc_value, exc_traceback) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            self._previous_excepthook(exc_type, exc_value, exc_traceback)
            return
        self.dispatch(exc_value, ErrorOrigin.UNCAUGHT_EXCEPTION)

    def _loop_exception_handler(self, loop, context) -> None:
        error = context.get("exception")
        if error is None:
            error = context.get("message", "Unhandled error in event loop")
        self.dispatch(error, ErrorOrigin.UNHANDLED_ASYNC)


global_handlers = GlobalErrorHandlers()


def setup_global_error_handlers(handler: ErrorHandler,
                                loop: Optional[asyncio.AbstractEventLoop] = None) -> GlobalErrorHandlers:
    """Register a handler on the process-wide registry and install its hooks."""
    global_handlers.register(handler)
    global_handlers.install(loop)
    return global_handlers
