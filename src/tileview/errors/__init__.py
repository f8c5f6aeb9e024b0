"""Custom exception hierarchy for tileview."""

from __future__ import annotations


class TileViewError(Exception):
    """Base class for all custom errors raised by tileview."""


# --- 3-layer hierarchy ---

class DomainError(TileViewError):
    """Base class for domain-level errors."""


class InfrastructureError(TileViewError):
    """Base class for infrastructure-level errors."""


class ApplicationError(TileViewError):
    """Base class for application-level errors."""


# --- Domain errors ---

class ProjectionError(DomainError, ValueError):
    """Raised when a coordinate is NaN, infinite or outside the source bounds."""


class ZoomUnsupported(DomainError):
    """Raised when a zoom level is outside the allowed range or unchanged."""


class TileOutOfRangeError(DomainError, IndexError):
    """Raised when a tile coordinate falls outside its zoom level grid."""


# --- Infrastructure errors ---

class MapSourceError(InfrastructureError):
    """Base class for map source failures."""


class MapSourceNotFoundError(MapSourceError, KeyError):
    """Raised when the registry has no source for the requested identifier."""


class TileLoadingError(InfrastructureError):
    """Base exception for recoverable tile loading problems."""


class TileAccessError(TileLoadingError):
    """Raised when a tile is missing or cannot be read."""


class TileDecodeError(TileLoadingError):
    """Raised when the tile payload cannot be decoded into an image."""


# --- Application errors ---

class SettingsError(ApplicationError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""


__all__ = [
    "ApplicationError",
    "DomainError",
    "InfrastructureError",
    "MapSourceError",
    "MapSourceNotFoundError",
    "ProjectionError",
    "SettingsError",
    "SettingsLoadError",
    "SettingsValidationError",
    "TileAccessError",
    "TileDecodeError",
    "TileLoadingError",
    "TileOutOfRangeError",
    "TileViewError",
    "ZoomUnsupported",
]
