"""Pure Python signals and observable values for list view models.

Handlers run on the thread that emits. Worker threads of a controller emit
too, so Qt front ends re-dispatch through ``QtListBridge``.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

_logger = logging.getLogger(__name__)


class Signal:
    """Observer list with lock-protected mutation.

    A failing handler is logged and skipped so the remaining handlers still
    run.
    """

    def __init__(self) -> None:
        self._handlers: list[Callable] = []
        self._lock = threading.Lock()

    def connect(self, handler: Callable) -> Callable:
        with self._lock:
            if handler not in self._handlers:
                self._handlers.append(handler)
        return handler

    def disconnect(self, handler: Callable) -> None:
        with self._lock:
            self._handlers.remove(handler)

    def disconnect_all(self) -> None:
        with self._lock:
            self._handlers.clear()

    def emit(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            try:
                handler(*args, **kwargs)
            except Exception:
                _logger.exception("Signal handler %r failed", handler)

    @property
    def handler_count(self) -> int:
        with self._lock:
            return len(self._handlers)


class ObservableProperty:
    """Value holder emitting ``changed(new_value, old_value)`` on change."""

    def __init__(self, initial_value: Any = None) -> None:
        self._value = initial_value
        self._lock = threading.Lock()
        self.changed = Signal()

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, new_value: Any) -> None:
        with self._lock:
            old_value = self._value
            if old_value == new_value:
                return
            self._value = new_value
        self.changed.emit(new_value, old_value)

    def read_only(self) -> "ReadOnlyProperty":
        return ReadOnlyProperty(self)


class ReadOnlyProperty:
    """View of an :class:`ObservableProperty` without a setter."""

    def __init__(self, source: ObservableProperty) -> None:
        self._source = source

    @property
    def value(self) -> Any:
        return self._source.value

    @property
    def changed(self) -> Signal:
        return self._source.changed
