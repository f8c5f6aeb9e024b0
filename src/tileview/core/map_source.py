"""Capability contract every map source provides to the viewport core."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol, runtime_checkable


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a single tile fetch delivered to the completion callback."""

    image: Any = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, image: Any) -> "FetchResult":
        return cls(image=image)

    @classmethod
    def failure(cls, error: Exception) -> "FetchResult":
        return cls(error=error)


TileCallback = Callable[[FetchResult], None]


@runtime_checkable
class MapSource(Protocol):
    """Projection, grid geometry and tile retrieval for one map style."""

    id: str
    name: str
    license: str
    latitude_bounds: tuple[float, float]
    longitude_bounds: tuple[float, float]

    def project_x(self, zoom: int, longitude: float) -> float:  # pragma: no cover - protocol
        ...

    def project_y(self, zoom: int, latitude: float) -> float:  # pragma: no cover - protocol
        ...

    def unproject_x(self, zoom: int, x: float) -> float:  # pragma: no cover - protocol
        ...

    def unproject_y(self, zoom: int, y: float) -> float:  # pragma: no cover - protocol
        ...

    def tile_size(self, zoom: int) -> int:  # pragma: no cover - protocol
        ...

    def min_zoom(self) -> int:  # pragma: no cover - protocol
        ...

    def max_zoom(self) -> int:  # pragma: no cover - protocol
        ...

    def grid_columns(self, zoom: int) -> int:  # pragma: no cover - protocol
        ...

    def grid_rows(self, zoom: int) -> int:  # pragma: no cover - protocol
        ...

    def fetch_tile(self, x: int, y: int, zoom: int, on_complete: TileCallback) -> None:  # pragma: no cover - protocol
        ...


__all__ = ["FetchResult", "MapSource", "TileCallback"]
