"""Single loadable tile and its load state."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


class TileState(enum.Enum):
    """Lifecycle of a tile, also used for the aggregate state of a view."""

    INIT = "init"
    LOADING = "loading"
    DONE = "done"
    ERROR = "error"


@dataclass(eq=False)
class Tile:
    """One square image of the grid at a given zoom level."""

    x: int
    y: int
    zoom: int
    size: int
    state: TileState = TileState.INIT
    renderable: Any = None

    @property
    def key(self) -> tuple[int, int]:
        return (self.x, self.y)

    def release(self) -> Any:
        """Forget the renderable handle and hand it back to the caller."""

        renderable = self.renderable
        self.renderable = None
        return renderable

    def __repr__(self) -> str:
        return f"Tile({self.zoom}/{self.x}/{self.y}, {self.state.value})"


__all__ = ["Tile", "TileState"]
