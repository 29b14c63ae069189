"""Frame scheduling on top of the Qt event loop.

Qt widgets have no ``requestAnimationFrame``.  :class:`QtFrameScheduler`
offers the same contract: ``request_frame`` arms a one-shot timer that fires
after roughly one display refresh and returns a handle, ``cancel_frame``
disarms it before it fires.
"""

from __future__ import annotations

import itertools
from typing import Callable, Dict, Optional

from PyQt5 import QtCore, QtGui

__all__ = ["QtFrameScheduler", "refresh_interval_ms"]

_FALLBACK_REFRESH_HZ = 60.0


def refresh_interval_ms(screen: Optional[QtGui.QScreen] = None) -> int:
    """Return the frame interval matching the refresh rate of ``screen``."""

    if screen is None:
        screen = QtGui.QGuiApplication.primaryScreen()
    rate = _FALLBACK_REFRESH_HZ
    if screen is not None:
        try:
            rate = float(screen.refreshRate())
        except (TypeError, ValueError):
            rate = _FALLBACK_REFRESH_HZ
    if rate <= 1.0:
        rate = _FALLBACK_REFRESH_HZ
    return max(1, int(round(1000.0 / rate)))


class QtFrameScheduler(QtCore.QObject):
    """Hand out cancellable "run before the next repaint" callbacks."""

    def __init__(self, interval_ms: Optional[int] = None, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._interval_ms = interval_ms
        self._timers: Dict[int, QtCore.QTimer] = {}
        self._ids = itertools.count(1)

    @property
    def interval_ms(self) -> int:
        if self._interval_ms is not None and self._interval_ms > 0:
            return int(self._interval_ms)
        return refresh_interval_ms()

    @property
    def pending(self) -> int:
        return len(self._timers)

    def request_frame(self, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        timer = QtCore.QTimer(self)
        timer.setSingleShot(True)
        timer.setTimerType(QtCore.Qt.PreciseTimer)
        timer.timeout.connect(lambda: self._fire(handle, callback))
        self._timers[handle] = timer
        timer.start(self.interval_ms)
        return handle

    def cancel_frame(self, handle: Optional[int]) -> None:
        if handle is None:
            return
        timer = self._timers.pop(handle, None)
        if timer is None:
            return
        timer.stop()
        timer.deleteLater()

    def cancel_all(self) -> None:
        for handle in list(self._timers):
            self.cancel_frame(handle)

    def _fire(self, handle: int, callback: Callable[[], None]) -> None:
        timer = self._timers.pop(handle, None)
        if timer is None:
            return
        timer.deleteLater()
        callback()
