from .bus import Event, EventBus, Subscription
from .list_events import (
    BulkActionCompletedEvent,
    ExportCompletedEvent,
    FiltersCommittedEvent,
    PageLoadedEvent,
)

__all__ = [
    "BulkActionCompletedEvent",
    "Event",
    "EventBus",
    "ExportCompletedEvent",
    "FiltersCommittedEvent",
    "PageLoadedEvent",
    "Subscription",
]
