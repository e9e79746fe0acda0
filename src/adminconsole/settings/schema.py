"""Schema helpers for the console settings file."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from ..config import (
    DEFAULT_API_URL,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_PAGE_SIZE,
    DEFAULT_POLL_INTERVAL_MS,
    EXPORT_PAGE_SIZE,
    MIN_POLL_INTERVAL_MS,
    MISSING_PLACEHOLDER,
)

_LIST_PROPERTIES: dict[str, Any] = {
    "page_size": {"type": "integer", "minimum": 1},
    "poll_interval_ms": {"type": "integer", "minimum": MIN_POLL_INTERVAL_MS},
    "export_page_size": {"type": "integer", "minimum": 1},
    "max_concurrency": {"type": "integer", "minimum": 1, "maximum": 64},
    "missing_placeholder": {"type": "string"},
}

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "adminconsole/settings.schema.json",
    "type": "object",
    "required": ["schema", "api", "lists"],
    "properties": {
        "schema": {"const": "adminconsole/settings@1"},
        "api": {
            "type": "object",
            "required": ["base_url"],
            "properties": {
                "base_url": {"type": "string", "minLength": 1},
                "timeout_sec": {"type": "number", "exclusiveMinimum": 0},
            },
            "additionalProperties": True,
        },
        "lists": {
            "type": "object",
            "properties": _LIST_PROPERTIES,
            "additionalProperties": False,
        },
        "resources": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": _LIST_PROPERTIES,
                "additionalProperties": False,
            },
        },
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": "adminconsole/settings@1",
    "api": {
        "base_url": DEFAULT_API_URL,
        "timeout_sec": 30.0,
    },
    "lists": {
        "page_size": DEFAULT_PAGE_SIZE,
        "poll_interval_ms": DEFAULT_POLL_INTERVAL_MS,
        "export_page_size": EXPORT_PAGE_SIZE,
        "max_concurrency": DEFAULT_MAX_CONCURRENCY,
        "missing_placeholder": MISSING_PLACEHOLDER,
    },
    "resources": {},
}

_validator = Draft202012Validator(SETTINGS_SCHEMA)


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result."""

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if key in {"api", "lists"} and isinstance(value, dict):
                merged.setdefault(key, {}).update(value)
                continue
            if key == "resources" and isinstance(value, dict):
                merged["resources"] = {
                    name: dict(overrides) for name, overrides in value.items()
                    if isinstance(overrides, dict)
                }
                continue
            merged[key] = value
    _validator.validate(merged)
    return merged


def validate_settings(data: dict[str, Any]) -> None:
    """Validate *data* against the settings schema."""

    _validator.validate(data)


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults", "validate_settings"]
