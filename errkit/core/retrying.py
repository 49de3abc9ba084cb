"""
Retry engine with optional exponential backoff.

Each attempt builds a fresh task from its factory. Intermediate failures
are reported to an optional observer and swallowed; only the error of the
last attempt is surfaced.
"""

import asyncio
import functools
import inspect
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional

from .task import TaskFactory, run_task


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    attempts: int = 3                      # Total attempts, first call included
    base_delay: float = 1.0                # Seconds to wait after the first failure
    backoff: bool = True                   # Double the delay after every failure
    on_retry: Optional[Callable[[int, Exception], Any]] = None

    def __post_init__(self):
        if self.attempts < 1:
            raise ValueError(f"attempts must be at least 1, got {self.attempts}")
        if self.base_delay < 0:
            raise ValueError(f"base_delay must be non-negative, got {self.base_delay}")

    def delay_for(self, attempt: int) -> float:
        """Get the wait time after the given failed attempt (1-indexed)."""
        if self.backoff:
            return self.base_delay * (2 ** (attempt - 1))
        return self.base_delay


def _resolve_config(config: Optional[RetryConfig], overrides: dict) -> RetryConfig:
    if config is None:
        return RetryConfig(**overrides)
    if overrides:
        return replace(config, **overrides)
    return config


async def retry(task_factory: TaskFactory, config: Optional[RetryConfig] = None,
                **overrides) -> Any:
    """
    Invoke a task until it succeeds or the attempt budget is spent.

    Args:
        task_factory: Zero-argument callable returning a fresh task per attempt
        config: Retry configuration, defaults to RetryConfig()
        **overrides: Field overrides applied on top of config
            (attempts, base_delay, backoff, on_retry)

    Returns:
        The value of the first successful attempt

    Raises:
        Exception: The error raised by the last attempt
    """
    if not callable(task_factory):
        raise TypeError(
            "retry() needs a task factory, not a task: "
            "pass `lambda: coro()` instead of `coro()`"
        )
    config = _resolve_config(config, overrides)

    for attempt in range(1, config.attempts + 1):
        try:
            return await run_task(task_factory)
        except Exception as exc:
            if attempt == config.attempts:
                raise

            if config.on_retry is not None:
                observed = config.on_retry(attempt, exc)
                if inspect.isawaitable(observed):
                    await observed

            await asyncio.sleep(config.delay_for(attempt))


def with_retry(config: Optional[RetryConfig] = None, **overrides):
    """
    Decorator retrying every call of an async function.

    >>> @with_retry(attempts=5, base_delay=0.5)
    ... async def fetch(url):
    ...     ...
    """
    config = _resolve_config(config, overrides)

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            return await retry(lambda: func(*args, **kwargs), config)
        return wrapper

    return decorator
