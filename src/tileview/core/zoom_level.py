"""Sparse grid of tiles belonging to a single zoom level."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator

from tileview.errors import TileOutOfRangeError

from .tile import Tile

_LOGGER = logging.getLogger(__name__)

ReleaseCallback = Callable[[Tile, Any], None]


class ZoomLevel:
    """Hold the tiles currently materialised for one zoom level.

    Tiles are keyed by their ``(x, y)`` grid coordinate and kept in insertion
    order so that :meth:`nth_tile` is stable between passes.  Removing a tile
    releases its renderable through ``on_release``; destroying the renderable
    is left to the host.
    """

    def __init__(
        self,
        level: int,
        columns: int,
        rows: int,
        tile_size: int,
        *,
        on_release: ReleaseCallback | None = None,
    ) -> None:
        if columns <= 0 or rows <= 0 or tile_size <= 0:
            raise ValueError(
                f"Invalid grid geometry {columns}x{rows} with tile size {tile_size}"
            )
        self.level = level
        self.columns = columns
        self.rows = rows
        self.tile_size = tile_size
        self.group: Any = None
        self.on_release = on_release
        self._tiles: dict[tuple[int, int], Tile] = {}

    # ------------------------------------------------------------------
    def add_tile(self, x: int, y: int) -> Tile:
        """Create the tile at ``(x, y)`` or return the existing one."""

        existing = self._tiles.get((x, y))
        if existing is not None:
            return existing
        if not (0 <= x < self.columns and 0 <= y < self.rows):
            raise TileOutOfRangeError(
                f"Tile ({x}, {y}) is outside the {self.columns}x{self.rows} grid of level {self.level}"
            )
        tile = Tile(x=x, y=y, zoom=self.level, size=self.tile_size)
        self._tiles[(x, y)] = tile
        return tile

    # ------------------------------------------------------------------
    def remove_tile(self, x: int, y: int) -> Tile | None:
        """Drop the tile at ``(x, y)`` and report its renderable, if any."""

        tile = self._tiles.pop((x, y), None)
        if tile is None:
            return None
        renderable = tile.release()
        if renderable is not None and self.on_release is not None:
            self.on_release(tile, renderable)
        return tile

    # ------------------------------------------------------------------
    def get_tile(self, x: int, y: int) -> Tile | None:
        return self._tiles.get((x, y))

    # ------------------------------------------------------------------
    def tile_count(self) -> int:
        return len(self._tiles)

    # ------------------------------------------------------------------
    def nth_tile(self, index: int) -> Tile | None:
        """Return the tile at position *index* in insertion order."""

        if not 0 <= index < len(self._tiles):
            return None
        for position, tile in enumerate(self._tiles.values()):
            if position == index:
                return tile
        return None

    # ------------------------------------------------------------------
    def tiles(self) -> list[Tile]:
        """Return a snapshot list that stays valid while tiles are removed."""

        return list(self._tiles.values())

    # ------------------------------------------------------------------
    def clear(self) -> None:
        """Release every tile, used when the view leaves this level."""

        _LOGGER.debug("Releasing %d tiles of zoom level %d", len(self._tiles), self.level)
        for x, y in list(self._tiles):
            self.remove_tile(x, y)

    # ------------------------------------------------------------------
    def width(self) -> int:
        return self.columns * self.tile_size

    # ------------------------------------------------------------------
    def height(self) -> int:
        return self.rows * self.tile_size

    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._tiles)

    def __iter__(self) -> Iterator[Tile]:
        return iter(self.tiles())

    def __contains__(self, key: object) -> bool:
        return key in self._tiles

    def __repr__(self) -> str:
        return (
            f"ZoomLevel(level={self.level}, grid={self.columns}x{self.rows}, "
            f"tiles={len(self._tiles)})"
        )


__all__ = ["ReleaseCallback", "ZoomLevel"]
