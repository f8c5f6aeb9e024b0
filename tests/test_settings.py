"""Tests for the settings manager and the typed view options."""

import json
from pathlib import Path

import pytest

from tileview.errors import SettingsLoadError, SettingsValidationError
from tileview.settings import DEFAULT_SETTINGS, SettingsManager, ViewSettings, merge_with_defaults


def test_settings_manager_roundtrip(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    manager = SettingsManager(path=settings_path)
    manager.load()
    assert settings_path.exists()
    assert manager.get("view.scroll_mode") == "push"

    changes = []
    manager.settings_changed.connect(lambda key, value: changes.append((key, value)))
    manager.set("sources.tile_directory", tmp_path / "tiles")

    assert changes == [("sources.tile_directory", str(tmp_path / "tiles"))]
    stored = json.loads(settings_path.read_text(encoding="utf-8"))
    assert stored["sources"]["tile_directory"] == str(tmp_path / "tiles")


def test_nested_updates_preserve_defaults(tmp_path: Path) -> None:
    manager = SettingsManager(path=tmp_path / "settings.json")
    manager.load()
    manager.set("view.initial_zoom", 7)
    assert manager.get("view.initial_zoom") == 7
    assert manager.get("view.easing") == "ease-in-out-circ"
    assert manager.get("view.missing", "fallback") == "fallback"


def test_invalid_values_are_rejected_without_writing(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    manager = SettingsManager(path=settings_path)
    manager.load()
    before = settings_path.read_text(encoding="utf-8")

    with pytest.raises(SettingsValidationError):
        manager.set("view.scroll_mode", "drift")

    assert manager.get("view.scroll_mode") == "push"
    assert settings_path.read_text(encoding="utf-8") == before


def test_partial_files_are_merged(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(json.dumps({"view": {"min_zoom": 2}}), encoding="utf-8")
    manager = SettingsManager(path=settings_path)
    manager.load()
    assert manager.get("view.min_zoom") == 2
    assert manager.get("schema") == DEFAULT_SETTINGS["schema"]


def test_unreadable_files_raise_load_error(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text("{broken", encoding="utf-8")
    with pytest.raises(SettingsLoadError):
        SettingsManager(path=settings_path).load()


def test_view_settings_from_document() -> None:
    data = merge_with_defaults(
        {
            "view": {"max_zoom": 12, "scroll_mode": "kinetic", "easing": "linear"},
            "sources": {"default": "file", "tile_directory": "/srv/tiles"},
        }
    )
    settings = ViewSettings.from_settings(data)
    assert settings.max_zoom == 12
    assert settings.min_zoom is None
    assert settings.scroll_mode == "kinetic"
    assert settings.easing == "linear"
    assert settings.source_id == "file"
    assert settings.tile_directory == "/srv/tiles"


def test_view_settings_reject_unknown_scroll_mode() -> None:
    with pytest.raises(ValueError):
        ViewSettings(scroll_mode="drift")
