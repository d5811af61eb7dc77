import os
from pathlib import Path
from typing import Callable

import pytest

# Qt はテスト中オフスクリーンで動かす
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


class ManualTicker:
    def __init__(self, interval_ms: int, callback: Callable[[], None]):
        self.interval_ms = interval_ms
        self.callback = callback
        self.cancel_count = 0

    @property
    def active(self) -> bool:
        return self.cancel_count == 0

    def cancel(self) -> None:
        self.cancel_count += 1


class ManualScheduler:
    """Scheduler fake: ticks are fired by the test through fire()."""

    def __init__(self):
        self.tickers: list[ManualTicker] = []

    def schedule_repeating(self, interval_ms, callback):
        ticker = ManualTicker(interval_ms, callback)
        self.tickers.append(ticker)
        return ticker

    @property
    def active_tickers(self) -> list[ManualTicker]:
        return [t for t in self.tickers if t.active]

    def fire(self, count: int = 1) -> None:
        """Fire every active ticker ``count`` times, like a running timer would."""
        for _ in range(count):
            for ticker in self.active_tickers:
                ticker.callback()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def tmp_settings(tmp_path: Path):
    """QSettings を INI + 一時フォルダに切り替え、テスト間の汚染を防ぐ。"""
    from PySide6.QtCore import QSettings

    QSettings.setDefaultFormat(QSettings.IniFormat)
    QSettings.setPath(QSettings.IniFormat, QSettings.UserScope, str(tmp_path))
    s = QSettings(QSettings.IniFormat, QSettings.UserScope, "TedApp.org", "CubeView")
    s.clear()
    yield s
    s.clear()
