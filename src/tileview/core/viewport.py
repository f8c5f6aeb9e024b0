"""Viewport geometry and the covering tile range computation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator

from .anchor import Anchor


@dataclass
class Viewport:
    """Visible rectangle in anchor-relative pixels at the current zoom.

    ``x``/``y`` is the top-left origin as the host sees it; adding the anchor
    gives the raw pixel origin in the full grid.
    """

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def raw_origin(self, anchor: Anchor) -> tuple[float, float]:
        return self.x + anchor.x, self.y + anchor.y

    def raw_center(self, anchor: Anchor) -> tuple[float, float]:
        return (
            self.x + anchor.x + self.width / 2.0,
            self.y + anchor.y + self.height / 2.0,
        )


@dataclass(frozen=True)
class TileRange:
    """Grid cells covering the viewport.

    ``end_x``/``end_y`` are exclusive for loading.  Eviction keeps tiles up
    to and including the end index so a trailing column that is still
    partially visible during sub-tile scrolling is never dropped.
    """

    first_x: int
    first_y: int
    end_x: int
    end_y: int

    def cells(self) -> Iterator[tuple[int, int]]:
        for x in range(self.first_x, self.end_x):
            for y in range(self.first_y, self.end_y):
                yield x, y

    def keeps(self, x: int, y: int) -> bool:
        return self.first_x <= x <= self.end_x and self.first_y <= y <= self.end_y

    def __len__(self) -> int:
        return max(0, self.end_x - self.first_x) * max(0, self.end_y - self.first_y)


def compute_tile_range(
    viewport: Viewport,
    anchor: Anchor,
    tile_size: int,
    columns: int,
    rows: int,
) -> TileRange:
    """Translate the visible rectangle into the grid cells that cover it."""

    left, top = viewport.raw_origin(anchor)
    left = max(0.0, left)
    top = max(0.0, top)

    first_x = math.floor(left / tile_size)
    first_y = math.floor(top / tile_size)
    # The extra cell covers the partially visible trailing row and column.
    count_x = math.ceil(viewport.width / tile_size) + 1
    count_y = math.ceil(viewport.height / tile_size) + 1

    return TileRange(
        first_x=first_x,
        first_y=first_y,
        end_x=min(first_x + count_x, columns),
        end_y=min(first_y + count_y, rows),
    )


__all__ = ["TileRange", "Viewport", "compute_tile_range"]
