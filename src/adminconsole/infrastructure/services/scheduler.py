"""Cancellable repeating tasks for the realtime poller."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

LOGGER = logging.getLogger(__name__)


class ScheduledTask(Protocol):
    """Handle of a repeating task; ``cancel()`` is idempotent."""

    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def schedule_repeating(self, interval_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        """Run *callback* every *interval_ms*, first run one interval from now."""
        ...


class _RepeatingThread(threading.Thread):
    def __init__(self, interval_ms: int, callback: Callable[[], None]) -> None:
        super().__init__(name=f"RepeatingTask-{interval_ms}ms")
        self._interval = interval_ms / 1000.0
        self._callback = callback
        self._stop_event = threading.Event()
        self.daemon = True

    @property
    def active(self) -> bool:
        return not self._stop_event.is_set()

    def run(self) -> None:
        while not self._stop_event.wait(self._interval):
            try:
                self._callback()
            except Exception:
                LOGGER.exception("Repeating task %s failed", self.name)

    def cancel(self) -> None:
        self._stop_event.set()


class ThreadingScheduler:
    """Scheduler backed by one daemon thread per task.

    Ticks fire on the trailing edge of each interval. After ``cancel()``
    returns no new tick starts; a tick already running finishes.
    """

    def schedule_repeating(self, interval_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        task = _RepeatingThread(interval_ms, callback)
        task.start()
        LOGGER.debug("Scheduled %s", task.name)
        return task


__all__ = ["ScheduledTask", "Scheduler", "ThreadingScheduler"]
