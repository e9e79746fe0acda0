"""Settings file management with validation and change notifications."""

from __future__ import annotations

import os
import sys
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jsonschema import ValidationError

from ..config import (
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_PAGE_SIZE,
    DEFAULT_POLL_INTERVAL_MS,
    EXPORT_PAGE_SIZE,
    MISSING_PLACEHOLDER,
)
from ..errors import SettingsLoadError, SettingsValidationError
from ..gui.viewmodels.signal import Signal
from ..utils.jsonio import read_json, write_json
from .schema import DEFAULT_SETTINGS, merge_with_defaults


def default_settings_path() -> Path:
    """Return the default settings.json location for the current platform."""

    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "adminconsole" / "settings.json"
        return Path.home() / "AppData" / "Roaming" / "adminconsole" / "settings.json"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "adminconsole" / "settings.json"
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / "adminconsole" / "settings.json"
    return Path.home() / ".config" / "adminconsole" / "settings.json"


@dataclass(frozen=True)
class ListSettings:
    """Effective knobs for one list controller."""

    page_size: int = DEFAULT_PAGE_SIZE
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    export_page_size: int = EXPORT_PAGE_SIZE
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    missing_placeholder: str = MISSING_PLACEHOLDER


class SettingsManager:
    """Load, validate and persist console settings.

    ``settings_changed`` emits ``(key, value)`` after every successful
    :meth:`set`.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._data: dict[str, Any] = deepcopy(DEFAULT_SETTINGS)
        self.settings_changed = Signal()

    @property
    def path(self) -> Path:
        return self._path or default_settings_path()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def load(self) -> None:
        """Load the settings JSON from disk, creating defaults if missing."""

        path = self.path
        self._path = path
        payload = None
        if path.exists():
            try:
                payload = read_json(path)
            except (OSError, ValueError) as exc:
                raise SettingsLoadError(f"{path}: {exc}") from exc
        if payload is not None and not isinstance(payload, dict):
            raise SettingsLoadError(f"{path}: top-level value must be an object")
        try:
            self._data = merge_with_defaults(payload)
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc
        self._write()

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return the value for *key*, supporting dotted access for nested keys."""

        target: Any = self._data
        for part in key.split("."):
            if not isinstance(target, dict) or part not in target:
                return default
            target = target[part]
        return target

    def set(self, key: str, value: Any) -> None:
        """Update *key* with *value*, validate, persist and notify."""

        candidate = deepcopy(self._data)
        parts = key.split(".")
        target: dict[str, Any] = candidate
        for part in parts[:-1]:
            branch = target.get(part)
            if not isinstance(branch, dict):
                branch = {}
                target[part] = branch
            target = branch
        target[parts[-1]] = value
        try:
            self._data = merge_with_defaults(candidate)
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc
        self._write()
        self.settings_changed.emit(key, value)

    def list_settings(self, resource: str | None = None) -> ListSettings:
        """Resolve the list defaults, overlaid with *resource* overrides."""

        values = dict(self._data.get("lists", {}))
        if resource:
            values.update(self._data.get("resources", {}).get(resource, {}))
        return ListSettings(**values)

    # ------------------------------------------------------------------
    # Internal utilities
    # ------------------------------------------------------------------
    def _write(self) -> None:
        write_json(self.path, self._data)


__all__ = ["ListSettings", "SettingsManager", "default_settings_path"]
