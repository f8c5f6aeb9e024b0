"""Settings file management with validation and change notifications."""

from __future__ import annotations

import os
import sys
from copy import deepcopy
from pathlib import Path
from typing import Any

from jsonschema import ValidationError

from ..errors import SettingsLoadError, SettingsValidationError
from ..utils.jsonio import read_json, write_json
from ..utils.signal import Signal
from .schema import DEFAULT_SETTINGS, merge_with_defaults
from .view import ViewSettings


def default_settings_path() -> Path:
    """Return the default settings.json location for the current platform."""

    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "tileview" / "settings.json"
        return Path.home() / "AppData" / "Roaming" / "tileview" / "settings.json"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "tileview" / "settings.json"
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / "tileview" / "settings.json"
    return Path.home() / ".config" / "tileview" / "settings.json"


def _normalise(payload: Any) -> Any:
    """Convert values to JSON-friendly Python types."""

    if isinstance(payload, dict):
        return {k: _normalise(v) for k, v in payload.items()}
    if isinstance(payload, (list, tuple)):
        return [_normalise(item) for item in payload]
    if isinstance(payload, Path):
        return str(payload)
    return payload


class SettingsManager:
    """Load, validate and persist viewport settings."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._data: dict[str, Any] = deepcopy(DEFAULT_SETTINGS)
        self.settings_changed = Signal()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    @property
    def path(self) -> Path:
        return self._path or default_settings_path()

    def load(self) -> None:
        """Load the settings JSON from disk, creating defaults if missing."""

        path = self.path
        self._path = path
        if path.exists():
            try:
                payload = read_json(path)
            except (OSError, ValueError) as exc:
                raise SettingsLoadError(f"Could not read {path}: {exc}") from exc
        else:
            payload = None
        if payload is not None and not isinstance(payload, dict):
            raise SettingsValidationError(f"{path} does not contain a JSON object")
        try:
            self._data = merge_with_defaults(payload)
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc
        self._write()

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return the value for *key*, supporting dotted access for nested keys."""

        target = self._data
        parts = key.split(".")
        for index, part in enumerate(parts):
            if not isinstance(target, dict) or part not in target:
                return default
            value = target[part]
            if index == len(parts) - 1:
                return value
            target = value
        return default

    def set(self, key: str, value: Any) -> None:
        """Update *key* with *value* and persist the change.

        The document is validated before anything is written, so a rejected
        value leaves both memory and disk untouched.
        """

        value = _normalise(value)
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

    def snapshot(self) -> dict[str, Any]:
        return deepcopy(self._data)

    def view_settings(self) -> ViewSettings:
        return ViewSettings.from_settings(self._data)

    # ------------------------------------------------------------------
    # Internal utilities
    # ------------------------------------------------------------------
    def _write(self) -> None:
        path = self.path
        self._path = path
        write_json(path, self._data)


__all__ = ["SettingsManager", "default_settings_path"]
