"""
Task abstraction shared by the combinators.

A task is an awaitable produced by a zero-argument factory. Coroutines can
only be awaited once, so every attempt or call builds a fresh one from its
factory. Outcome values capture how a task settled without raising.
"""

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar, Union

T = TypeVar("T")

TaskFactory = Callable[[], Union[Awaitable[T], T]]


@dataclass(frozen=True)
class Success(Generic[T]):
    """A task that settled with a value."""
    value: T

    @property
    def success(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    """A task that settled with an error."""
    error: BaseException

    @property
    def success(self) -> bool:
        return False

    def unwrap(self):
        raise self.error


Outcome = Union[Success[T], Failure]


async def run_task(factory: TaskFactory) -> Any:
    """
    Build a task from its factory and wait for it.

    Synchronous factories are supported: a non-awaitable return value is
    treated as an immediate success.
    """
    result = factory()
    if inspect.isawaitable(result):
        result = await result
    return result


def ensure_task(task: Awaitable[T]) -> "asyncio.Future[T]":
    """Schedule an awaitable on the running loop and return its future."""
    if not inspect.isawaitable(task):
        raise TypeError(f"Expected an awaitable, got {type(task).__name__}")
    return asyncio.ensure_future(task)


def discard_outcome(future: asyncio.Future) -> None:
    """
    Done-callback that retrieves a future's exception and drops it.

    Used on tasks whose outcome is no longer observed so asyncio does not
    report the exception as never retrieved.
    """
    if not future.cancelled():
        future.exception()


async def try_catch(task: Awaitable[T]) -> Outcome:
    """
    Await a task and return its outcome instead of raising.

    Args:
        task: Awaitable to wait for

    Returns:
        Success with the value, or Failure with the raised exception
    """
    try:
        value = await task
    except Exception as exc:
        return Failure(exc)
    return Success(value)


def try_catch_sync(fn: Callable[[], T]) -> Outcome:
    """Call a synchronous function and return its outcome instead of raising."""
    try:
        value = fn()
    except Exception as exc:
        return Failure(exc)
    return Success(value)
