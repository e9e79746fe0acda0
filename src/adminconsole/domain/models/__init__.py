from .core import (
    EMPTY_PAGE,
    BulkActionResult,
    ExportColumn,
    ExportResult,
    FilterSet,
    Page,
    PageRequest,
    Resource,
)
from .filters import FilterField, FilterKind, is_unset

__all__ = [
    "EMPTY_PAGE",
    "BulkActionResult",
    "ExportColumn",
    "ExportResult",
    "FilterField",
    "FilterKind",
    "FilterSet",
    "Page",
    "PageRequest",
    "Resource",
    "is_unset",
]
