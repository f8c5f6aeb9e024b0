"""Spherical Web Mercator geometry shared by the bundled map sources."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod

from tileview.config import MAX_ZOOM, MERCATOR_LAT_BOUND, MIN_ZOOM, TILE_SIZE
from tileview.core.map_source import TileCallback


class MercatorMapSource(ABC):
    """Base class providing projection and ``2^z x 2^z`` grid geometry.

    Subclasses only implement :meth:`fetch_tile`.  Coordinates outside the
    grid are not clamped here; :class:`tileview.core.projection.Projection`
    rejects out-of-bounds input before it reaches these formulas.
    """

    latitude_bounds = (-MERCATOR_LAT_BOUND, MERCATOR_LAT_BOUND)
    longitude_bounds = (-180.0, 180.0)

    def __init__(
        self,
        source_id: str,
        name: str,
        *,
        license: str = "",
        min_zoom: int = MIN_ZOOM,
        max_zoom: int = MAX_ZOOM,
        tile_size: int = TILE_SIZE,
    ) -> None:
        if min_zoom < 0 or max_zoom < min_zoom:
            raise ValueError(f"Invalid zoom range [{min_zoom}, {max_zoom}]")
        if tile_size <= 0:
            raise ValueError(f"Tile size must be positive, got {tile_size}")
        self.id = source_id
        self.name = name
        self.license = license
        self._min_zoom = min_zoom
        self._max_zoom = max_zoom
        self._tile_size = tile_size

    # ------------------------------------------------------------------
    def min_zoom(self) -> int:
        return self._min_zoom

    def max_zoom(self) -> int:
        return self._max_zoom

    def tile_size(self, zoom: int) -> int:
        return self._tile_size

    def grid_columns(self, zoom: int) -> int:
        return 1 << zoom

    def grid_rows(self, zoom: int) -> int:
        return 1 << zoom

    # ------------------------------------------------------------------
    def _world_size(self, zoom: int) -> float:
        return float((1 << zoom) * self._tile_size)

    def project_x(self, zoom: int, longitude: float) -> float:
        return (longitude + 180.0) / 360.0 * self._world_size(zoom)

    def project_y(self, zoom: int, latitude: float) -> float:
        phi = math.radians(latitude)
        merc = math.log(math.tan(phi) + 1.0 / math.cos(phi))
        return (1.0 - merc / math.pi) / 2.0 * self._world_size(zoom)

    def unproject_x(self, zoom: int, x: float) -> float:
        return x / self._world_size(zoom) * 360.0 - 180.0

    def unproject_y(self, zoom: int, y: float) -> float:
        n = math.pi - 2.0 * math.pi * y / self._world_size(zoom)
        return math.degrees(math.atan(math.sinh(n)))

    # ------------------------------------------------------------------
    @abstractmethod
    def fetch_tile(self, x: int, y: int, zoom: int, on_complete: TileCallback) -> None:
        """Load tile ``(x, y)`` of *zoom* and report it through *on_complete*."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"


__all__ = ["MercatorMapSource"]
