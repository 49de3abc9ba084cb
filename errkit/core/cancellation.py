"""
Cancellation wrapper masking a task's outcome.

Cancellation is advisory and works at the result level only: it does not
stop the wrapped task. Once cancel() is called the handle fails with an
OperationCancelledError and the task's real outcome, whenever it arrives,
is discarded. Work that must actually stop has to watch its own signal.
"""

import asyncio
from typing import Awaitable, Generic, TypeVar

from .exceptions import OperationCancelledError
from .task import discard_outcome, ensure_task

T = TypeVar("T")


class CancellableHandle(Generic[T]):
    """
    Handle over a task whose delivered outcome can be voided.

    Await the handle (or its ``future``) to get the task's value.
    """

    def __init__(self, task: Awaitable[T], message: str = "Operation was cancelled"):
        self.message = message
        self._task = ensure_task(task)
        self.future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._cancelled = False
        self._task.add_done_callback(self._on_task_done)

    @property
    def cancelled(self) -> bool:
        """True once cancel() has voided the outcome."""
        return self._cancelled

    def cancel(self) -> bool:
        """
        Void the task's outcome.

        Returns:
            bool: True if this call cancelled the handle, False if it was
            already settled or already cancelled
        """
        if self.future.done():
            return False
        self._cancelled = True
        self.future.set_exception(OperationCancelledError(self.message))
        # Callers may never await a handle they gave up on
        self.future.add_done_callback(discard_outcome)
        return True

    def _on_task_done(self, task: asyncio.Future) -> None:
        if self.future.done():
            discard_outcome(task)
            return

        if task.cancelled():
            self.future.set_exception(OperationCancelledError(self.message))
        elif task.exception() is not None:
            self.future.set_exception(task.exception())
        else:
            self.future.set_result(task.result())

    def __await__(self):
        return self.future.__await__()


def with_cancel(task: Awaitable[T]) -> CancellableHandle[T]:
    """
    Wrap a task so its outcome can be cancelled by the caller.

    Must be called from inside a running event loop; returns immediately.

    >>> handle = with_cancel(fetch(url))
    >>> handle.cancel()
    >>> await handle  # raises OperationCancelledError
    """
    return CancellableHandle(task)
