"""Host display contract and an in-memory implementation of it."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from .tile import Tile


class DisplaySurface(Protocol):
    """Operations the core needs from the host scene graph.

    The core never draws.  It creates placeholders, hands decoded images to
    them, arranges them inside per-zoom-level groups and detaches them again.
    ``parent`` is ``None`` for the root map layer.
    """

    def create_group(self, zoom: int) -> Any:  # pragma: no cover - interface definition only
        ...

    def create_placeholder(self, tile: Tile) -> Any:  # pragma: no cover - interface definition only
        ...

    def set_image(self, renderable: Any, image: Any) -> None:  # pragma: no cover - interface definition only
        ...

    def show_error(self, renderable: Any) -> None:  # pragma: no cover - interface definition only
        ...

    def attach(self, renderable: Any, parent: Any | None) -> None:  # pragma: no cover - interface definition only
        ...

    def detach(self, renderable: Any, parent: Any | None) -> None:  # pragma: no cover - interface definition only
        ...

    def set_position(self, renderable: Any, x: float, y: float) -> None:  # pragma: no cover - interface definition only
        ...

    def set_size(self, renderable: Any, width: float, height: float) -> None:  # pragma: no cover - interface definition only
        ...


@dataclass(eq=False)
class RecordedItem:
    """Renderable handle produced by :class:`RecordingSurface`."""

    name: str
    position: tuple[float, float] = (0.0, 0.0)
    size: tuple[float, float] = (0.0, 0.0)
    content: Any = None
    error: bool = False
    parent: "RecordedItem | None" = None
    attached: bool = False
    children: list["RecordedItem"] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"RecordedItem({self.name!r})"


class RecordingSurface:
    """Headless :class:`DisplaySurface` that records every arrangement call."""

    def __init__(self) -> None:
        self.root: list[RecordedItem] = []
        self.attach_count = 0
        self.detach_count = 0
        self.position_count = 0

    # ------------------------------------------------------------------
    def create_group(self, zoom: int) -> RecordedItem:
        return RecordedItem(name=f"level-{zoom}")

    # ------------------------------------------------------------------
    def create_placeholder(self, tile: Tile) -> RecordedItem:
        return RecordedItem(name=f"tile-{tile.zoom}-{tile.x}-{tile.y}")

    # ------------------------------------------------------------------
    def set_image(self, renderable: RecordedItem, image: Any) -> None:
        renderable.content = image
        renderable.error = False

    # ------------------------------------------------------------------
    def show_error(self, renderable: RecordedItem) -> None:
        renderable.content = None
        renderable.error = True

    # ------------------------------------------------------------------
    def attach(self, renderable: RecordedItem, parent: RecordedItem | None) -> None:
        siblings = self.root if parent is None else parent.children
        if renderable not in siblings:
            siblings.append(renderable)
        renderable.parent = parent
        renderable.attached = True
        self.attach_count += 1

    # ------------------------------------------------------------------
    def detach(self, renderable: RecordedItem, parent: RecordedItem | None) -> None:
        siblings = self.root if parent is None else parent.children
        if renderable in siblings:
            siblings.remove(renderable)
        renderable.parent = None
        renderable.attached = False
        self.detach_count += 1

    # ------------------------------------------------------------------
    def set_position(self, renderable: RecordedItem, x: float, y: float) -> None:
        renderable.position = (x, y)
        self.position_count += 1

    # ------------------------------------------------------------------
    def set_size(self, renderable: RecordedItem, width: float, height: float) -> None:
        renderable.size = (width, height)

    # ------------------------------------------------------------------
    def attached_tiles(self) -> list[RecordedItem]:
        """Return every tile renderable currently attached below a root group."""

        return [child for group in self.root for child in group.children]


__all__ = ["DisplaySurface", "RecordedItem", "RecordingSurface"]
