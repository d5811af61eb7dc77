"""Repeating tick scheduling contracts (Qt-independent)."""
from __future__ import annotations

from typing import Callable, Protocol


class TickerHandle(Protocol):
    """Handle of a scheduled repeating task."""

    @property
    def active(self) -> bool:
        """True while the task is still scheduled."""
        ...

    def cancel(self) -> None:
        """Stop the task. Calling it more than once is a no-op."""
        ...


class TickScheduler(Protocol):
    """
    Factory of repeating tasks.

    Implementations must call ``callback`` every ``interval_ms`` milliseconds
    on the thread that owns the controller until the handle is cancelled.
    """

    def schedule_repeating(self, interval_ms: int, callback: Callable[[], None]) -> TickerHandle:
        ...
