from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Hashable, Mapping, Optional, Tuple

Resource = Mapping[str, Any]
FilterSet = Dict[str, Any]


@dataclass(frozen=True)
class PageRequest:
    """Parameters of one list request; captured when the request is issued."""

    filters: Mapping[str, Any]
    page_number: int
    page_size: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "filters", MappingProxyType(dict(self.filters)))


@dataclass(frozen=True)
class Page:
    """One server page. Replaced wholesale on every applied fetch."""

    page_number: int = 1
    page_size: int = 1
    total_pages: int = 0
    total_items: int = 0
    items: Tuple[Resource, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    @property
    def last_page(self) -> int:
        return max(1, self.total_pages)

    @property
    def has_next(self) -> bool:
        return self.page_number < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page_number > 1

    def ids(self, id_field: str) -> Tuple[Hashable, ...]:
        return tuple(item[id_field] for item in self.items if id_field in item)


EMPTY_PAGE = Page()


@dataclass(frozen=True)
class BulkActionResult:
    succeeded_ids: FrozenSet[Hashable] = frozenset()
    failed_ids: FrozenSet[Hashable] = frozenset()
    errors: Mapping[Hashable, str] = field(default_factory=dict)
    nothing_selected: bool = False

    @property
    def attempted(self) -> int:
        return len(self.succeeded_ids) + len(self.failed_ids)

    @property
    def all_succeeded(self) -> bool:
        return not self.nothing_selected and not self.failed_ids


@dataclass(frozen=True)
class ExportColumn:
    """One CSV column: header text plus a dotted accessor into each row."""

    header: str
    path: str
    default: Optional[str] = None
    kind: str = "text"


@dataclass(frozen=True)
class ExportResult:
    filename: str
    content: bytes
    row_count: int
    media_type: str = "text/csv"

    @property
    def empty(self) -> bool:
        return self.row_count == 0
