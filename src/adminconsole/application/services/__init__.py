from .csv_exporter import CsvExporter, export_filename, to_iso8601
from .filter_store import FilterStore, build_filter_schema
from .page_payload import items_from_payload, page_from_payload, stats_from_payload

__all__ = [
    "CsvExporter",
    "FilterStore",
    "build_filter_schema",
    "export_filename",
    "items_from_payload",
    "page_from_payload",
    "stats_from_payload",
    "to_iso8601",
]
