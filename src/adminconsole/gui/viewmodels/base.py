"""BaseViewModel: pure Python, no Qt dependency.

Tracks event-bus subscriptions and teardown callbacks so that ``dispose()``
releases everything a view model acquired while mounted.
"""

from __future__ import annotations

import logging
from typing import Callable, Type

from adminconsole.events.bus import EventBus, Subscription

_logger = logging.getLogger(__name__)


class BaseViewModel:
    """ViewModel base class; pure Python, no Qt dependency."""

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []
        self._teardown: list[Callable[[], None]] = []
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def subscribe_event(
        self,
        event_bus: EventBus,
        event_type: Type,
        handler: Callable,
    ) -> Subscription:
        """Subscribe to an event type and track the subscription."""
        sub = event_bus.subscribe(event_type, handler)
        self._subscriptions.append(sub)
        return sub

    def add_teardown(self, callback: Callable[[], None]) -> None:
        """Run *callback* during :meth:`dispose`, last registered first."""
        self._teardown.append(callback)

    def dispose(self) -> None:
        """Cancel tracked subscriptions and run teardown callbacks once."""
        if self._disposed:
            return
        self._disposed = True
        for sub in self._subscriptions:
            sub.cancel()
        self._subscriptions.clear()
        while self._teardown:
            callback = self._teardown.pop()
            try:
                callback()
            except Exception:
                _logger.exception("Teardown callback %r failed", callback)
