from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from adminconsole.errors import SettingsLoadError, SettingsValidationError
from adminconsole.settings.manager import ListSettings, SettingsManager, default_settings_path


def test_settings_manager_roundtrip(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    manager = SettingsManager(path=settings_path)
    manager.load()
    assert settings_path.exists()
    assert manager.get("lists.page_size") == 20
    changes = []
    manager.settings_changed.connect(lambda key, value: changes.append((key, value)))

    manager.set("lists.page_size", 50)

    assert changes == [("lists.page_size", 50)]
    assert manager.get("lists.page_size") == 50
    stored = json.loads(settings_path.read_text(encoding="utf-8"))
    assert stored["lists"]["page_size"] == 50


def test_invalid_update_is_rejected_and_not_written(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    manager = SettingsManager(path=settings_path)
    manager.load()
    changes = []
    manager.settings_changed.connect(lambda key, value: changes.append(key))

    with pytest.raises(SettingsValidationError):
        manager.set("lists.poll_interval_ms", 10)

    assert manager.get("lists.poll_interval_ms") == 10_000
    assert changes == []
    stored = json.loads(settings_path.read_text(encoding="utf-8"))
    assert stored["lists"]["poll_interval_ms"] == 10_000


def test_partial_file_is_merged_with_defaults(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(
        json.dumps({"api": {"base_url": "https://shop.example/api"}, "lists": {"page_size": 25}}),
        encoding="utf-8",
    )
    manager = SettingsManager(path=settings_path)

    manager.load()

    assert manager.get("api.base_url") == "https://shop.example/api"
    assert manager.get("api.timeout_sec") == 30.0
    assert manager.list_settings() == ListSettings(page_size=25)


def test_resource_overrides(tmp_path: Path) -> None:
    manager = SettingsManager(path=tmp_path / "settings.json")
    manager.load()
    manager.set("resources.audit-logs.poll_interval_ms", 5_000)

    assert manager.list_settings("audit-logs").poll_interval_ms == 5_000
    assert manager.list_settings("users").poll_interval_ms == 10_000


def test_unknown_list_setting_rejected(tmp_path: Path) -> None:
    manager = SettingsManager(path=tmp_path / "settings.json")
    manager.load()
    with pytest.raises(SettingsValidationError):
        manager.set("lists.colour", "red")


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_unreadable_file(tmp_path: Path, content: str) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(content, encoding="utf-8")

    with pytest.raises(SettingsLoadError):
        SettingsManager(path=settings_path).load()


def test_schema_violation_in_file(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(json.dumps({"lists": {"max_concurrency": 0}}), encoding="utf-8")

    with pytest.raises(SettingsValidationError):
        SettingsManager(path=settings_path).load()


def test_get_missing_key_returns_default(tmp_path: Path) -> None:
    manager = SettingsManager(path=tmp_path / "settings.json")
    manager.load()
    assert manager.get("api.proxy", "none") == "none"
    assert manager.get("lists.page_size.nested") is None


@pytest.mark.skipif(sys.platform in ("win32", "darwin"), reason="XDG layout only")
def test_default_path_honours_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert default_settings_path() == tmp_path / "adminconsole" / "settings.json"
