"""Central error routing: log, publish on the bus, notify the view."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from adminconsole.errors import (
    ExportError,
    FilterValidationError,
    PayloadError,
    TransportError,
)
from adminconsole.events.bus import Event, EventBus


class ErrorSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass(kw_only=True)
class ErrorOccurredEvent(Event):
    error: Exception
    severity: ErrorSeverity
    context: dict = field(default_factory=dict)


def severity_for(error: Exception) -> ErrorSeverity:
    """Pick the default severity for *error*."""

    if isinstance(error, FilterValidationError):
        return ErrorSeverity.WARNING
    # A malformed payload points at a backend contract break.
    if isinstance(error, PayloadError):
        return ErrorSeverity.CRITICAL
    if isinstance(error, (TransportError, ExportError)):
        return ErrorSeverity.ERROR
    return ErrorSeverity.CRITICAL


class ErrorHandler:
    def __init__(self, logger: logging.Logger, event_bus: EventBus):
        self._logger = logger
        self._events = event_bus
        self._ui_callback: Optional[Callable[[str, ErrorSeverity], None]] = None

    def register_ui_callback(self, callback: Callable[[str, ErrorSeverity], None]) -> None:
        self._ui_callback = callback

    def handle(
        self,
        error: Exception,
        severity: Optional[ErrorSeverity] = None,
        context: Optional[dict] = None,
    ) -> ErrorSeverity:
        """Log *error*, publish it and forward it to the UI when severe enough."""

        severity = severity or severity_for(error)
        context = dict(context or {})

        log_method = getattr(self._logger, severity.value, self._logger.error)
        resource = context.get("resource", "-")
        log_method("[%s] %s: %s", resource, error.__class__.__name__, error)

        self._events.publish(ErrorOccurredEvent(error=error, severity=severity, context=context))

        if self._ui_callback and severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL):
            operation = context.get("operation")
            message = f"{operation} failed: {error}" if operation else str(error)
            self._ui_callback(message, severity)
        return severity
