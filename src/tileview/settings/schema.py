"""Schema helpers for the viewport settings file."""

from __future__ import annotations

import os
from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from tileview.config import (
    ANCHOR_ZOOM_THRESHOLD,
    DEFAULT_SOURCE_ID,
    INITIAL_ZOOM,
    SCROLL_MODES,
    SETTINGS_SCHEMA_ID,
)
from tileview.core.easing import EASING_CURVES

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "tileview/settings.schema.json",
    "type": "object",
    "required": ["schema", "view", "sources"],
    "properties": {
        "schema": {"const": SETTINGS_SCHEMA_ID},
        "view": {
            "type": "object",
            "properties": {
                "min_zoom": {"type": ["integer", "null"], "minimum": 0},
                "max_zoom": {"type": ["integer", "null"], "minimum": 0},
                "initial_zoom": {"type": "integer", "minimum": 0},
                "keep_center_on_resize": {"type": "boolean"},
                "scroll_mode": {"type": "string", "enum": list(SCROLL_MODES)},
                "easing": {"type": "string", "enum": sorted(EASING_CURVES)},
                "anchor_threshold": {"type": "integer", "minimum": 0},
                "last_center": {
                    "type": "array",
                    "items": {"type": "number"},
                    "minItems": 2,
                    "maxItems": 2,
                },
            },
            "additionalProperties": True,
        },
        "sources": {
            "type": "object",
            "properties": {
                "default": {"type": "string", "minLength": 1},
                "tile_directory": {"type": ["string", "null"]},
            },
            "additionalProperties": True,
        },
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": SETTINGS_SCHEMA_ID,
    "view": {
        "min_zoom": None,
        "max_zoom": None,
        "initial_zoom": INITIAL_ZOOM,
        "keep_center_on_resize": True,
        "scroll_mode": "push",
        "easing": "ease-in-out-circ",
        "anchor_threshold": ANCHOR_ZOOM_THRESHOLD,
        "last_center": [0.0, 0.0],
    },
    "sources": {
        "default": DEFAULT_SOURCE_ID,
        "tile_directory": None,
    },
}

_validator = Draft202012Validator(SETTINGS_SCHEMA)

_NESTED_SECTIONS = ("view", "sources")


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result."""

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if key in _NESTED_SECTIONS and isinstance(value, dict):
                target = merged.setdefault(key, {})
                for sub_key, sub_value in value.items():
                    target[sub_key] = sub_value
                continue
            merged[key] = value
    directory = merged["sources"].get("tile_directory")
    if directory not in {None, ""}:
        try:
            merged["sources"]["tile_directory"] = os.fspath(directory)
        except TypeError:
            merged["sources"]["tile_directory"] = None
    _validator.validate(merged)
    return merged


def validate_settings(data: dict[str, Any]) -> None:
    """Validate *data* against the settings schema."""

    _validator.validate(data)


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults", "validate_settings"]
