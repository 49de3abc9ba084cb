"""
Timeout wrapper racing a task against a deadline.

The deadline is an overlay on outcome delivery: when it fires first the
caller gets an OperationTimeoutError, but the wrapped task keeps running
and whatever it settles with later is dropped silently.
"""

import asyncio
import functools
import inspect
from typing import Awaitable, TypeVar

from .exceptions import OperationTimeoutError
from .task import discard_outcome, ensure_task

T = TypeVar("T")

DEFAULT_TIMEOUT_MESSAGE = "Operation timed out"


async def with_timeout(task: Awaitable[T], timeout: float,
                       message: str = DEFAULT_TIMEOUT_MESSAGE) -> T:
    """
    Wait for a task, failing with a TIMEOUT error once the deadline passes.

    Args:
        task: Coroutine, Task or Future to wait for
        timeout: Deadline in seconds, non-negative
        message: Message of the timeout error

    Returns:
        The task's own value if it settles first

    Raises:
        OperationTimeoutError: If the deadline fires first
        Exception: The task's own error if it fails first
    """
    if timeout is None or timeout < 0:
        if inspect.iscoroutine(task):
            task.close()
        raise ValueError(f"timeout must be a non-negative number, got {timeout}")

    future = ensure_task(task)

    # Settlement that already happened logically precedes the deadline
    if not future.done():
        # asyncio.wait neither cancels the future nor leaves its timer behind
        try:
            await asyncio.wait({future}, timeout=timeout)
        except asyncio.CancelledError:
            future.add_done_callback(discard_outcome)
            raise

    if future.done():
        return future.result()

    future.add_done_callback(discard_outcome)
    raise OperationTimeoutError(message, timeout=timeout)


def timeout(seconds: float, message: str = DEFAULT_TIMEOUT_MESSAGE):
    """Decorator applying with_timeout to every call of an async function."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            return await with_timeout(func(*args, **kwargs), seconds, message)
        return wrapper

    return decorator
