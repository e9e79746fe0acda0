from dataclasses import dataclass, field

from .bus import Event


@dataclass(kw_only=True)
class PageLoadedEvent(Event):
    resource: str = ""
    page_number: int = 1
    total_pages: int = 0
    total_items: int = 0
    silent: bool = False


@dataclass(kw_only=True)
class FiltersCommittedEvent(Event):
    resource: str = ""
    filters: dict = field(default_factory=dict)


@dataclass(kw_only=True)
class BulkActionCompletedEvent(Event):
    resource: str = ""
    succeeded: int = 0
    failed: int = 0


@dataclass(kw_only=True)
class ExportCompletedEvent(Event):
    resource: str = ""
    filename: str = ""
    row_count: int = 0
