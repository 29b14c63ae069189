"""Shared fixtures: off-screen QApplication and a hand-driven frame scheduler."""
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Callable, Dict, List

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(scope="session")
def qapp():
    from PyQt5 import QtWidgets

    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication(["glowfield-tests"])
    yield app


class ManualScheduler:
    """Frame scheduler whose callbacks only run when the test says so."""

    def __init__(self) -> None:
        self._pending: Dict[int, Callable[[], None]] = {}
        self._next = 0
        self.requested = 0
        self.cancelled: List[int] = []

    def request_frame(self, callback: Callable[[], None]) -> int:
        self._next += 1
        self.requested += 1
        self._pending[self._next] = callback
        return self._next

    def cancel_frame(self, handle) -> None:
        if handle is None:
            return
        if self._pending.pop(handle, None) is not None:
            self.cancelled.append(handle)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def run_pending(self) -> int:
        """Run the callbacks queued so far; returns how many ran."""
        batch = list(self._pending.items())
        self._pending.clear()
        for _handle, callback in batch:
            callback()
        return len(batch)

    def run_frames(self, count: int) -> None:
        for _ in range(count):
            self.run_pending()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()
