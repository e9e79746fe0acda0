"""Draft/applied filter snapshots for one list screen.

Editing a filter only touches the draft. The applied snapshot, the one the
server sees, changes through :meth:`FilterStore.commit`,
:meth:`FilterStore.promote` (live fields) or :meth:`FilterStore.reset`.
The store does no I/O; the owning controller decides when to fetch.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from jsonschema import Draft202012Validator, FormatChecker

from adminconsole.domain.models import FilterField, FilterKind, FilterSet, is_unset
from adminconsole.errors import FilterValidationError

LOGGER = logging.getLogger(__name__)

_SCALARS = (str, int, float, bool)


def _field_schema(field: FilterField) -> dict[str, Any]:
    if field.kind is FilterKind.ENUM:
        return {"enum": ["", *field.choices]}
    if field.kind is FilterKind.DATE:
        return {"anyOf": [{"const": ""}, {"type": "string", "format": "date"}]}
    if field.kind is FilterKind.BOOLEAN:
        return {"anyOf": [{"const": ""}, {"type": "boolean"}]}
    return {"type": "string"}


def build_filter_schema(fields: Sequence[FilterField]) -> dict[str, Any]:
    """Return the JSON schema a committed filter snapshot must satisfy."""

    return {
        "type": "object",
        "properties": {field.name: _field_schema(field) for field in fields},
        "additionalProperties": False,
    }


def _normalise(field: Optional[FilterField], value: Any) -> Any:
    if value is None:
        return ""
    if field is None:
        return value
    if field.kind is FilterKind.DATE:
        if isinstance(value, datetime):
            return value.date().isoformat()
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, str):
            return value.strip()
    if field.kind is FilterKind.BOOLEAN and isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "false"}:
            return lowered == "true"
        return lowered
    if field.kind is FilterKind.STRING and isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class FilterStore:
    """Holds the draft and applied :data:`FilterSet` of one controller."""

    def __init__(
        self,
        fields: Iterable[FilterField] = (),
        *,
        date_ranges: Iterable[Tuple[str, str]] = (),
        initial: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._fields: Dict[str, FilterField] = {field.name: field for field in fields}
        self._date_ranges = tuple(date_ranges)
        self._validator: Optional[Draft202012Validator] = None
        if self._fields:
            self._validator = Draft202012Validator(
                build_filter_schema(list(self._fields.values())),
                format_checker=FormatChecker(),
            )
        defaults = self.defaults()
        if initial:
            defaults.update({key: self._normalise_key(key, value) for key, value in initial.items()})
            self.validate(defaults)
        self._draft: FilterSet = dict(defaults)
        self._applied: FilterSet = dict(defaults)

    # -- properties --------------------------------------------------------

    @property
    def fields(self) -> Tuple[FilterField, ...]:
        return tuple(self._fields.values())

    @property
    def draft(self) -> FilterSet:
        return dict(self._draft)

    @property
    def applied(self) -> FilterSet:
        return dict(self._applied)

    @property
    def is_dirty(self) -> bool:
        return self._draft != self._applied

    def field(self, key: str) -> Optional[FilterField]:
        return self._fields.get(key)

    def is_live(self, key: str) -> bool:
        field = self._fields.get(key)
        return bool(field and field.live)

    def defaults(self) -> FilterSet:
        return {field.name: field.default for field in self._fields.values()}

    # -- mutation ----------------------------------------------------------

    def set_draft(self, key: str, value: Any) -> None:
        """Update one draft value. Validation waits until commit."""

        self._draft[key] = self._normalise_key(key, value)

    def commit(self) -> FilterSet:
        """Validate the draft and make it the applied snapshot."""

        candidate = dict(self._draft)
        self.validate(candidate)
        self._applied = candidate
        LOGGER.debug("Committed filters %s", candidate)
        return dict(self._applied)

    def promote(self, key: str) -> FilterSet:
        """Copy a single draft key into the applied snapshot."""

        candidate = dict(self._applied)
        candidate[key] = self._draft.get(key, "")
        self.validate(candidate)
        self._applied = candidate
        return dict(self._applied)

    def reset(self) -> FilterSet:
        self._draft = self.defaults()
        self._applied = self.defaults()
        return dict(self._applied)

    def discard_draft(self) -> FilterSet:
        """Throw away uncommitted edits."""

        self._draft = dict(self._applied)
        return dict(self._draft)

    # -- validation --------------------------------------------------------

    def validate(self, filters: Mapping[str, Any]) -> None:
        """Raise :class:`FilterValidationError` when *filters* is not acceptable."""

        errors: Dict[str, str] = {}
        if self._validator is None:
            for key, value in filters.items():
                if value is not None and not isinstance(value, _SCALARS):
                    errors[key] = f"unsupported value type {type(value).__name__}"
        else:
            for key in filters:
                if key not in self._fields:
                    errors[key] = "unknown filter"
            known = {key: value for key, value in filters.items() if key in self._fields}
            for error in self._validator.iter_errors(known):
                key = str(error.path[0]) if error.path else "*"
                errors.setdefault(key, self._describe(key, error.message))
        for start_key, end_key in self._date_ranges:
            start, end = filters.get(start_key), filters.get(end_key)
            if is_unset(start) or is_unset(end) or start_key in errors or end_key in errors:
                continue
            if str(start) > str(end):
                errors[end_key] = f"must not be earlier than {start_key}"
        if errors:
            raise FilterValidationError(errors)

    def _describe(self, key: str, message: str) -> str:
        field = self._fields.get(key)
        if field is None:
            return message
        if field.kind is FilterKind.ENUM:
            return f"must be one of {', '.join(field.choices)}"
        if field.kind is FilterKind.DATE:
            return "must be an ISO date (YYYY-MM-DD)"
        if field.kind is FilterKind.BOOLEAN:
            return "must be true or false"
        return message

    def _normalise_key(self, key: str, value: Any) -> Any:
        return _normalise(self._fields.get(key), value)


__all__ = ["FilterStore", "build_filter_schema"]
