"""Frame clock backed by a ``QTimer`` on the GUI thread."""

from __future__ import annotations

import time

from PySide6.QtCore import QObject, QTimer

from tileview.config import FRAME_INTERVAL_MS
from tileview.core.clock import FrameCallback


class QtFrameClock:
    """Deliver animation frames roughly every ``interval_ms`` milliseconds."""

    def __init__(self, *, interval_ms: int = FRAME_INTERVAL_MS, timer_parent: QObject | None = None) -> None:
        self._callback: FrameCallback | None = None
        self._timer = QTimer(timer_parent)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._handle_tick)

    def now(self) -> float:
        return time.monotonic()

    def start(self, callback: FrameCallback) -> None:
        self._callback = callback
        self._timer.start()

    def stop(self) -> None:
        self._callback = None
        self._timer.stop()

    def is_active(self) -> bool:
        return self._timer.isActive()

    def _handle_tick(self) -> None:
        callback = self._callback
        if callback is None:
            self._timer.stop()
            return
        callback(self.now())


__all__ = ["QtFrameClock"]
