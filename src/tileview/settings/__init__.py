"""Persistent viewport settings."""

from .manager import SettingsManager, default_settings_path
from .schema import DEFAULT_SETTINGS, SETTINGS_SCHEMA, merge_with_defaults, validate_settings
from .view import ViewSettings

__all__ = [
    "DEFAULT_SETTINGS",
    "SETTINGS_SCHEMA",
    "SettingsManager",
    "ViewSettings",
    "default_settings_path",
    "merge_with_defaults",
    "validate_settings",
]
