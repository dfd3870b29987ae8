"""
Progress and cancellation sinks driven by long-running package operations.

The sink is the only object shared between the worker running an operation and
whoever observes it, so implementations must be safe to update from one thread
and read from another.
"""
from __future__ import annotations

import threading
from typing import Callable, Optional, Protocol


class ProgressSink(Protocol):
    def notify(self, percent: Optional[int] = None) -> None:
        """Report progress in percent (0..100), or an indeterminate pulse when None."""

    def is_cancelled(self) -> bool:
        """Polled between chunks of work; True asks the operation to stop."""


class NullProgress:
    """Never cancelled; ignores every update."""

    def notify(self, percent: Optional[int] = None) -> None:
        pass

    def is_cancelled(self) -> bool:
        return False


class CancellableProgress:
    """
    Thread-safe sink: an event for cancellation plus an optional percent callback.

    The callback runs on the worker thread.
    """

    def __init__(
        self,
        on_percent: Optional[Callable[[int], None]] = None,
        on_pulse: Optional[Callable[[], None]] = None,
    ):
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._percent: Optional[int] = None
        self._on_percent = on_percent
        self._on_pulse = on_pulse

    def notify(self, percent: Optional[int] = None) -> None:
        if percent is None:
            if self._on_pulse:
                self._on_pulse()
            return
        if not 0 <= percent <= 100:
            raise ValueError(f"Progress out of range: {percent}")
        with self._lock:
            self._percent = percent
        if self._on_percent:
            self._on_percent(percent)

    @property
    def percent(self) -> Optional[int]:
        with self._lock:
            return self._percent

    def cancel(self) -> None:
        self._cancelled.set()

    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()
