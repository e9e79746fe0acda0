import logging
from unittest.mock import Mock

import pytest

from adminconsole.errors import (
    ExportError,
    FilterValidationError,
    PayloadError,
    TransportError,
)
from adminconsole.errors.handler import ErrorHandler, ErrorOccurredEvent, ErrorSeverity, severity_for
from adminconsole.events.bus import EventBus


@pytest.fixture
def handler_parts():
    logger = Mock(spec=logging.Logger)
    event_bus = Mock(spec=EventBus)
    return logger, event_bus, ErrorHandler(logger, event_bus)


def test_handle_logs_with_resource_and_publishes(handler_parts):
    logger, event_bus, handler = handler_parts
    error = TransportError("Session expired. Please login again.", status_code=401)

    severity = handler.handle(error, context={"resource": "users", "operation": "Loading"})

    assert severity is ErrorSeverity.ERROR
    logger.error.assert_called_once_with("[%s] %s: %s", "users", "TransportError", error)
    event = event_bus.publish.call_args[0][0]
    assert isinstance(event, ErrorOccurredEvent)
    assert event.error is error
    assert event.context == {"resource": "users", "operation": "Loading"}


def test_ui_callback_gets_operation_prefixed_message(handler_parts):
    _, _, handler = handler_parts
    callback = Mock()
    handler.register_ui_callback(callback)

    handler.handle(ExportError("no rows"), context={"operation": "Export"})

    callback.assert_called_once_with("Export failed: no rows", ErrorSeverity.ERROR)


def test_warnings_stay_out_of_the_ui(handler_parts):
    logger, _, handler = handler_parts
    callback = Mock()
    handler.register_ui_callback(callback)

    handler.handle(FilterValidationError({"role": "must be one of admin"}))

    callback.assert_not_called()
    logger.warning.assert_called_once()


def test_explicit_severity_wins(handler_parts):
    logger, _, handler = handler_parts

    assert handler.handle(TransportError("blip"), ErrorSeverity.INFO) is ErrorSeverity.INFO
    logger.info.assert_called_once()


@pytest.mark.parametrize(
    "error, expected",
    [
        (FilterValidationError({"x": "bad"}), ErrorSeverity.WARNING),
        (PayloadError("missing totalPages"), ErrorSeverity.CRITICAL),
        (TransportError("down"), ErrorSeverity.ERROR),
        (ExportError("failed"), ErrorSeverity.ERROR),
        (KeyError("bug"), ErrorSeverity.CRITICAL),
    ],
)
def test_default_severity(error, expected):
    assert severity_for(error) is expected


def test_real_bus_delivers_error_events():
    bus = EventBus()
    received = []
    bus.subscribe(ErrorOccurredEvent, received.append)
    handler = ErrorHandler(logging.getLogger("adminconsole.test"), bus)

    handler.handle(TransportError("down"))

    assert [event.severity for event in received] == [ErrorSeverity.ERROR]
