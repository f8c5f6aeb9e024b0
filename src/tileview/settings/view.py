"""Typed view options consumed by :class:`tileview.core.controller.ViewportController`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from tileview.config import (
    ANCHOR_ZOOM_THRESHOLD,
    DEFAULT_SOURCE_ID,
    INITIAL_ZOOM,
    MAX_REPRESENTABLE_PIXEL,
    SCROLL_MODES,
)


@dataclass(frozen=True)
class ViewSettings:
    """Behavioural options of a viewport.

    ``min_zoom``/``max_zoom`` of ``None`` defer to the map source's range.
    """

    min_zoom: int | None = None
    max_zoom: int | None = None
    initial_zoom: int = INITIAL_ZOOM
    keep_center_on_resize: bool = True
    scroll_mode: str = "push"
    easing: str = "ease-in-out-circ"
    anchor_threshold: int = ANCHOR_ZOOM_THRESHOLD
    representable_bound: int = MAX_REPRESENTABLE_PIXEL
    source_id: str = DEFAULT_SOURCE_ID
    tile_directory: str | None = None

    def __post_init__(self) -> None:
        if self.scroll_mode not in SCROLL_MODES:
            raise ValueError(f"Unknown scroll mode '{self.scroll_mode}'")

    @classmethod
    def from_settings(cls, data: Mapping[str, Any]) -> "ViewSettings":
        """Build view options from a validated settings document."""

        view = data.get("view") or {}
        sources = data.get("sources") or {}
        return cls(
            min_zoom=view.get("min_zoom"),
            max_zoom=view.get("max_zoom"),
            initial_zoom=int(view.get("initial_zoom", INITIAL_ZOOM)),
            keep_center_on_resize=bool(view.get("keep_center_on_resize", True)),
            scroll_mode=view.get("scroll_mode", "push"),
            easing=view.get("easing", "ease-in-out-circ"),
            anchor_threshold=int(view.get("anchor_threshold", ANCHOR_ZOOM_THRESHOLD)),
            source_id=sources.get("default") or DEFAULT_SOURCE_ID,
            tile_directory=sources.get("tile_directory"),
        )


__all__ = ["ViewSettings"]
