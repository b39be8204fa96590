"""Caller-supplied operation context carrying cancellation and deadlines."""

from __future__ import annotations

import threading
import time


class OperationCancelledError(RuntimeError):
    """Raised when work is attempted under a cancelled or expired context."""


class OperationContext:
    """Cancellation flag plus optional deadline shared by one logical operation.

    ``timeout`` is measured in seconds from construction on the monotonic clock.
    ``cancel`` may be called from any thread.
    """

    def __init__(self, *, timeout: float | None = None):
        self._cancelled = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def raise_if_done(self) -> None:
        if self.cancelled:
            raise OperationCancelledError("operation cancelled")
        if self.expired:
            raise OperationCancelledError("operation deadline exceeded")


__all__ = ["OperationCancelledError", "OperationContext"]
