"""Bundled map sources and the registry used to select them."""

from .file_source import FileTileSource
from .mercator import MercatorMapSource
from .registry import MapSourceRegistry, SourceDescription, create_default_registry
from .synthetic import SyntheticTileSource

__all__ = [
    "FileTileSource",
    "MapSourceRegistry",
    "MercatorMapSource",
    "SourceDescription",
    "SyntheticTileSource",
    "create_default_registry",
]
