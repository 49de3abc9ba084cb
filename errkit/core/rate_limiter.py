"""
Rate-limited dispatcher for controlling call admission.

This module serializes calls to a task producer through a FIFO queue that
admits at most ``max_calls`` invocations per fixed window. It limits the
admission rate only: calls admitted in a window run concurrently whether or
not earlier ones have finished.
"""

import asyncio
import functools
import inspect
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, Optional, Tuple

from .exceptions import OperationCancelledError
from .task import discard_outcome


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting behavior."""
    max_calls: int = 10                     # Maximum admissions per window
    per_interval: float = 1.0               # Window length in seconds

    def __post_init__(self):
        if self.max_calls < 1:
            raise ValueError(f"max_calls must be at least 1, got {self.max_calls}")
        if self.per_interval <= 0:
            raise ValueError(f"per_interval must be positive, got {self.per_interval}")


@dataclass
class _PendingCall:
    args: Tuple[Any, ...]
    kwargs: Dict[str, Any]
    future: asyncio.Future = field(repr=False)


class RateLimiter:
    """
    Throttled entry point in front of a task producer.

    Features:
    - One FIFO queue shared by every caller of this instance
    - Fixed window counter reset by a recurring timer
    - Per-call result delivery: one caller's failure never affects another

    The queue and counter are touched only by the drain logic and the window
    timer, both running on the event loop the limiter was first called from,
    so no lock is needed. Calling into one limiter from several event loops
    or threads is not supported.
    """

    def __init__(self, producer: Callable, config: Optional[RateLimitConfig] = None):
        functools.update_wrapper(self, producer, updated=())
        self.producer = producer
        self.config = config or RateLimitConfig()
        self.queue: Deque[_PendingCall] = deque()
        self.calls_in_window = 0
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._window_timer: Optional[asyncio.TimerHandle] = None
        self._closed = False

    @property
    def pending(self) -> int:
        """Number of calls waiting for admission."""
        return len(self.queue)

    @property
    def window_timer_active(self) -> bool:
        return self._window_timer is not None

    async def __call__(self, *args, **kwargs) -> Any:
        """
        Enqueue a call and wait for the producer's outcome for it.

        Raises:
            Exception: Whatever the producer raised for this call
            OperationCancelledError: If the limiter is closed before admission
        """
        if self._closed:
            raise OperationCancelledError("Rate limiter is closed")

        loop = asyncio.get_running_loop()
        if self._loop is not loop:
            self._bind(loop)

        call = _PendingCall(args, kwargs, loop.create_future())
        self.queue.append(call)
        self._drain()
        return await call.future

    def _bind(self, loop: asyncio.AbstractEventLoop) -> None:
        """Start the window timer on the loop of the first call."""
        if self._window_timer is not None:
            self._window_timer.cancel()
        self._loop = loop
        self.calls_in_window = 0
        self._window_timer = loop.call_later(self.config.per_interval, self._on_window_tick)

    def _on_window_tick(self) -> None:
        self.calls_in_window = 0
        self._window_timer = self._loop.call_later(self.config.per_interval, self._on_window_tick)
        self._drain()

    def _drain(self) -> None:
        while self.queue and self.calls_in_window < self.config.max_calls:
            call = self.queue.popleft()
            if call.future.done():
                # Caller gave up while queued, the slot stays free
                continue
            self.calls_in_window += 1
            self._dispatch(call)

    def _dispatch(self, call: _PendingCall) -> None:
        try:
            result = self.producer(*call.args, **call.kwargs)
        except Exception as exc:
            call.future.set_exception(exc)
            return

        if not inspect.isawaitable(result):
            call.future.set_result(result)
            return

        task = asyncio.ensure_future(result)
        task.add_done_callback(functools.partial(self._deliver, call.future))

    @staticmethod
    def _deliver(future: asyncio.Future, task: asyncio.Future) -> None:
        if future.done():
            discard_outcome(task)
            return
        if task.cancelled():
            future.cancel()
        elif task.exception() is not None:
            future.set_exception(task.exception())
        else:
            future.set_result(task.result())

    def get_state(self) -> Dict[str, Any]:
        """Get current limiter state information."""
        return {
            "max_calls": self.config.max_calls,
            "per_interval": self.config.per_interval,
            "calls_in_window": self.calls_in_window,
            "pending": self.pending,
            "window_timer_active": self.window_timer_active,
            "closed": self._closed
        }

    def reset(self) -> None:
        """Reset the window counter, admitting queued calls right away."""
        self.calls_in_window = 0
        if self._loop is not None and not self._closed:
            self._drain()

    def close(self) -> None:
        """Stop the window timer and fail every call still queued."""
        self._closed = True
        if self._window_timer is not None:
            self._window_timer.cancel()
            self._window_timer = None
        while self.queue:
            call = self.queue.popleft()
            if not call.future.done():
                call.future.set_exception(OperationCancelledError("Rate limiter is closed"))


def rate_limit(producer: Callable, max_calls: int, per_interval: float) -> RateLimiter:
    """
    Build a rate-limited entry point in front of a task producer.

    Args:
        producer: Callable returning a task (or a plain value) for its arguments
        max_calls: Maximum producer invocations per window
        per_interval: Window length in seconds

    Returns:
        RateLimiter: Awaitable callable taking the producer's arguments
    """
    return RateLimiter(producer, RateLimitConfig(max_calls=max_calls, per_interval=per_interval))


def rate_limited(max_calls: int, per_interval: float):
    """Decorator turning an async function into a RateLimiter."""

    def decorator(func):
        return rate_limit(func, max_calls, per_interval)

    return decorator
