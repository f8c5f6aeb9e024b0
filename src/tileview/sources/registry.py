"""Explicit registry of the map sources a viewport can switch between."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from tileview.core.map_source import MapSource
from tileview.errors import MapSourceError, MapSourceNotFoundError

from .file_source import FileTileSource
from .synthetic import SyntheticTileSource

_LOGGER = logging.getLogger(__name__)

SourceFactory = Callable[[], MapSource]


@dataclass(frozen=True)
class SourceDescription:
    """Summary of a registered source used by listings."""

    id: str
    name: str
    instantiated: bool


class MapSourceRegistry:
    """Map source identifiers to lazily constructed sources.

    Each registry caches the instances it builds, so repeated lookups of the
    same identifier return the same object and the tile caches inside the
    sources survive a switch back and forth.
    """

    def __init__(self) -> None:
        self._factories: dict[str, tuple[str, SourceFactory]] = {}
        self._instances: dict[str, MapSource] = {}

    # ------------------------------------------------------------------
    def register(self, source_id: str, factory: SourceFactory, *, name: str | None = None) -> None:
        """Register *factory* under *source_id*, replacing any previous entry."""

        if not source_id:
            raise ValueError("Map source identifiers must not be empty")
        self._factories[source_id] = (name or source_id, factory)
        self._instances.pop(source_id, None)

    def register_instance(self, source: MapSource) -> None:
        """Register an already constructed source under its own ``id``."""

        self.register(source.id, lambda: source, name=source.name)
        self._instances[source.id] = source

    # ------------------------------------------------------------------
    def get(self, source_id: str) -> MapSource:
        """Return the source registered as *source_id*."""

        cached = self._instances.get(source_id)
        if cached is not None:
            return cached
        try:
            _, factory = self._factories[source_id]
        except KeyError:
            raise MapSourceNotFoundError(f"No map source registered as '{source_id}'") from None
        source = factory()
        if source.id != source_id:
            raise MapSourceError(
                f"Factory for '{source_id}' produced a source identified as '{source.id}'"
            )
        _LOGGER.debug("Created map source %s", source_id)
        self._instances[source_id] = source
        return source

    # ------------------------------------------------------------------
    def ids(self) -> list[str]:
        return sorted(self._factories)

    def describe(self) -> list[SourceDescription]:
        return [
            SourceDescription(
                id=source_id,
                name=self._factories[source_id][0],
                instantiated=source_id in self._instances,
            )
            for source_id in self.ids()
        ]

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._factories

    def __len__(self) -> int:
        return len(self._factories)


def create_default_registry(tile_directory: str | None = None) -> MapSourceRegistry:
    """Return a registry holding the bundled sources.

    The ``file`` source is only registered when *tile_directory* is given.
    """

    registry = MapSourceRegistry()
    registry.register("synthetic", SyntheticTileSource, name="Synthetic grid")
    if tile_directory:
        registry.register(
            "file",
            lambda: FileTileSource(tile_directory),
            name=f"Local tiles ({tile_directory})",
        )
    return registry


__all__ = [
    "MapSourceRegistry",
    "SourceDescription",
    "SourceFactory",
    "create_default_registry",
]
