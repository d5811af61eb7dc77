"""QTimer backed implementation of the tick scheduling contracts."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer

logger = logging.getLogger(__name__)


class QtTickerHandle:
    """Owns one running QTimer until cancelled."""

    def __init__(self, timer: QTimer) -> None:
        self._timer: Optional[QTimer] = timer

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def cancel(self) -> None:
        if self._timer is None:
            return
        timer, self._timer = self._timer, None
        timer.stop()
        timer.deleteLater()


class QtTickScheduler:
    """
    Creates a repeating QTimer per scheduled task.

    Timers are parented to ``parent`` so they die with the hosting widget
    even if a handle is never cancelled.
    """

    def __init__(self, parent: QObject | None = None) -> None:
        self._parent = parent

    def schedule_repeating(self, interval_ms: int, callback: Callable[[], None]) -> QtTickerHandle:
        timer = QTimer(self._parent)
        timer.setInterval(interval_ms)
        timer.timeout.connect(callback)
        timer.start()
        logger.debug("Repeating timer started (%d ms)", interval_ms)
        return QtTickerHandle(timer)
