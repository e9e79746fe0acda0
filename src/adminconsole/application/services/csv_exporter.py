"""CSV serialisation for full-dataset exports."""

from __future__ import annotations

import csv
import io
import json
import logging
from datetime import date, datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from adminconsole.config import EXPORT_DATE_FORMAT, MISSING_PLACEHOLDER
from adminconsole.domain.models import ExportColumn, ExportResult
from adminconsole.errors import ExportError

LOGGER = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("csv",)

_MISSING = object()


def to_iso8601(value: Any) -> Optional[str]:
    """Render *value* as an ISO-8601 UTC timestamp, or ``None`` if it is not one.

    Numbers are read as epoch milliseconds, the unit the backend emits.
    Epochs outside the platform's representable range are not timestamps.
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            moment = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError:
            return None
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
    else:
        return None
    rendered = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return rendered.replace("+00:00", "Z")


def resolve_path(row: Mapping[str, Any], path: str) -> Any:
    """Follow a dotted *path* (``user.email``) through nested mappings."""

    current: Any = row
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return _MISSING
        current = current[part]
    return current


def export_filename(resource: str, fmt: str = "csv", today: Optional[date] = None) -> str:
    today = today or datetime.now().date()
    return f"{resource}-{today.strftime(EXPORT_DATE_FORMAT)}.{fmt}"


class CsvExporter:
    """Render rows as a rectangular CSV document.

    Without declared columns the header is the first-seen key order across
    all rows, so the output does not depend on dict ordering of any single
    row.
    """

    def __init__(
        self,
        columns: Sequence[ExportColumn] = (),
        *,
        placeholder: str = MISSING_PLACEHOLDER,
    ) -> None:
        self._columns = tuple(columns)
        self._placeholder = placeholder

    def columns_for(self, rows: Iterable[Mapping[str, Any]]) -> List[ExportColumn]:
        if self._columns:
            return list(self._columns)
        seen: dict[str, None] = {}
        for row in rows:
            for key in row:
                seen.setdefault(str(key), None)
        return [ExportColumn(header=key, path=key) for key in seen]

    def render(self, rows: Sequence[Mapping[str, Any]]) -> bytes:
        columns = self.columns_for(rows)
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow([column.header for column in columns])
        for index, row in enumerate(rows):
            if not isinstance(row, Mapping):
                raise ExportError(f"export row {index} is not an object")
            writer.writerow([self._cell(row, column) for column in columns])
        return buffer.getvalue().encode("utf-8")

    def export(self, resource: str, rows: Sequence[Mapping[str, Any]], fmt: str = "csv") -> ExportResult:
        if fmt not in SUPPORTED_FORMATS:
            raise ExportError(f"unsupported export format {fmt!r}")
        content = self.render(rows)
        LOGGER.info("Rendered %d %s rows for export", len(rows), resource)
        return ExportResult(
            filename=export_filename(resource, fmt),
            content=content,
            row_count=len(rows),
        )

    def _cell(self, row: Mapping[str, Any], column: ExportColumn) -> str:
        value = resolve_path(row, column.path)
        if value is _MISSING or value is None or value == "":
            return column.default if column.default is not None else self._placeholder
        if column.kind == "timestamp" or isinstance(value, (datetime, date)):
            rendered = to_iso8601(value)
            if rendered is not None:
                return rendered
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (Mapping, list, tuple)):
            return json.dumps(value, ensure_ascii=False, sort_keys=True, default=str)
        return str(value)


__all__ = ["CsvExporter", "SUPPORTED_FORMATS", "export_filename", "resolve_path", "to_iso8601"]
