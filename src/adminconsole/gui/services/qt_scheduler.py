"""QTimer-backed scheduler for controllers living on the Qt GUI thread."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer

LOGGER = logging.getLogger(__name__)


class QtRepeatingTask:
    """Wraps one repeating ``QTimer``; ``cancel()`` stops and releases it."""

    def __init__(self, timer: QTimer) -> None:
        self._timer: Optional[QTimer] = timer

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def cancel(self) -> None:
        timer, self._timer = self._timer, None
        if timer is None:
            return
        timer.stop()
        timer.deleteLater()


class QtTimerScheduler:
    """Create timers on the calling thread, which must run a Qt event loop.

    Ticks are delivered by the event loop, so the callback runs on the GUI
    thread and can touch widgets directly.
    """

    def __init__(self, parent: Optional[QObject] = None) -> None:
        self._parent = parent

    def schedule_repeating(self, interval_ms: int, callback: Callable[[], None]) -> QtRepeatingTask:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        timer = QTimer(self._parent)
        timer.setSingleShot(False)
        timer.setInterval(interval_ms)
        timer.timeout.connect(callback)
        timer.start()
        LOGGER.debug("Started %d ms QTimer", interval_ms)
        return QtRepeatingTask(timer)


__all__ = ["QtRepeatingTask", "QtTimerScheduler"]
