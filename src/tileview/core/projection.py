"""Validated geographic <-> pixel conversions on top of a :class:`MapSource`."""

from __future__ import annotations

import math

from tileview.errors import ProjectionError

from .map_source import MapSource


def _require_finite(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as exc:
        raise ProjectionError(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(value):
        raise ProjectionError(f"{name} must be finite, got {value!r}")
    return value


class Projection:
    """Stateless façade over the projection functions of a map source.

    The map source supplies the actual mathematics.  This wrapper only
    rejects degenerate input so that NaN or out-of-bounds coordinates never
    leak into viewport state, and offers a few convenience helpers used by
    the controller.
    """

    def __init__(self, source: MapSource) -> None:
        self._source = source

    # ------------------------------------------------------------------
    @property
    def source(self) -> MapSource:
        return self._source

    # ------------------------------------------------------------------
    def validate(self, latitude: float, longitude: float) -> tuple[float, float]:
        """Return ``(latitude, longitude)`` as floats or raise :class:`ProjectionError`."""

        latitude = _require_finite("latitude", latitude)
        longitude = _require_finite("longitude", longitude)

        min_lat, max_lat = self._source.latitude_bounds
        if not min_lat <= latitude <= max_lat:
            raise ProjectionError(
                f"latitude {latitude} is outside [{min_lat}, {max_lat}] for source '{self._source.id}'"
            )
        min_lon, max_lon = self._source.longitude_bounds
        if not min_lon <= longitude <= max_lon:
            raise ProjectionError(
                f"longitude {longitude} is outside [{min_lon}, {max_lon}] for source '{self._source.id}'"
            )
        return latitude, longitude

    # ------------------------------------------------------------------
    def clamp(self, latitude: float, longitude: float) -> tuple[float, float]:
        """Pull finite coordinates back inside the declared source bounds."""

        latitude = _require_finite("latitude", latitude)
        longitude = _require_finite("longitude", longitude)
        min_lat, max_lat = self._source.latitude_bounds
        min_lon, max_lon = self._source.longitude_bounds
        return (
            min(max(latitude, min_lat), max_lat),
            min(max(longitude, min_lon), max_lon),
        )

    # ------------------------------------------------------------------
    def to_pixels(self, zoom: int, latitude: float, longitude: float) -> tuple[float, float]:
        """Project validated coordinates into raw pixel space at *zoom*."""

        latitude, longitude = self.validate(latitude, longitude)
        return (
            self._source.project_x(zoom, longitude),
            self._source.project_y(zoom, latitude),
        )

    # ------------------------------------------------------------------
    def to_coords(self, zoom: int, x: float, y: float) -> tuple[float, float]:
        """Return ``(latitude, longitude)`` for the raw pixel ``(x, y)``."""

        x = _require_finite("x", x)
        y = _require_finite("y", y)
        return (
            self._source.unproject_y(zoom, y),
            self._source.unproject_x(zoom, x),
        )

    # ------------------------------------------------------------------
    def tile_size(self, zoom: int) -> int:
        return self._source.tile_size(zoom)

    # ------------------------------------------------------------------
    def grid_extent(self, zoom: int) -> tuple[float, float]:
        """Return the full pixel width and height of the grid at *zoom*."""

        size = self._source.tile_size(zoom)
        return (
            float(self._source.grid_columns(zoom) * size),
            float(self._source.grid_rows(zoom) * size),
        )


__all__ = ["Projection"]
