"""Re-base pixel positions so they stay inside the renderer's integer range."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from tileview.config import ANCHOR_ZOOM_THRESHOLD, MAX_REPRESENTABLE_PIXEL

_LOGGER = logging.getLogger(__name__)


def _split_extent(grid_extent: float | tuple[float, float]) -> tuple[float, float]:
    if isinstance(grid_extent, tuple):
        return grid_extent
    return grid_extent, grid_extent


@dataclass(frozen=True)
class Anchor:
    """Pixel origin subtracted from every raw position before rendering."""

    x: float = 0.0
    y: float = 0.0
    valid_for_zoom: int | None = None


class AnchorManager:
    """Compute the anchor used to keep rendered coordinates bounded.

    Hosts that store actor positions in 16-bit integers cannot place tiles
    of high zoom levels at their raw pixel offset.  Every rendered position
    is therefore expressed relative to an anchor near the visible region:
    ``screen = raw - anchor``.  The anchor only moves when the view drifts
    close to either end of the representable range or the zoom level
    changes.  Callers must shift their viewport origin by the returned delta
    so the move is never visible.
    """

    def __init__(
        self,
        *,
        threshold: int = ANCHOR_ZOOM_THRESHOLD,
        bound: int = MAX_REPRESENTABLE_PIXEL,
    ) -> None:
        self._threshold = threshold
        self._bound = bound
        self._anchor = Anchor()

    # ------------------------------------------------------------------
    @property
    def anchor(self) -> Anchor:
        return self._anchor

    @property
    def x(self) -> float:
        return self._anchor.x

    @property
    def y(self) -> float:
        return self._anchor.y

    @property
    def threshold(self) -> int:
        return self._threshold

    @property
    def bound(self) -> int:
        return self._bound

    # ------------------------------------------------------------------
    def needs_anchor(self, zoom: int, grid_extent: float | tuple[float, float] = 0.0) -> bool:
        """Return ``True`` when grids at *zoom* exceed the representable range.

        Sources with large tiles outgrow the range below the threshold zoom,
        so a *grid_extent* whose last pixel does not fit also requires one.
        """

        extent_x, extent_y = _split_extent(grid_extent)
        return zoom >= self._threshold or max(extent_x, extent_y) - 1 > self._bound

    # ------------------------------------------------------------------
    def reset(self) -> None:
        """Forget the current anchor, forcing a recomputation on next update."""

        self._anchor = Anchor()

    # ------------------------------------------------------------------
    def update_anchor(
        self,
        zoom: int,
        center_x: float,
        center_y: float,
        viewport_w: float,
        viewport_h: float,
        grid_extent: float | tuple[float, float],
    ) -> bool:
        """Recompute the anchor for a raw view centre and report whether it moved."""

        extent_x, extent_y = _split_extent(grid_extent)
        previous = self._anchor

        if not self.needs_anchor(zoom, grid_extent):
            self._anchor = Anchor(0.0, 0.0, zoom)
            return (previous.x, previous.y) != (0.0, 0.0)

        # The anchor-relative centre must keep a viewport of room on both sides.
        relative_x = center_x - previous.x
        relative_y = center_y - previous.y
        need_update = (
            previous.valid_for_zoom != zoom
            or relative_x + viewport_w >= self._bound
            or relative_y + viewport_h >= self._bound
            or relative_x <= viewport_w
            or relative_y <= viewport_h
        )
        if not need_update:
            return False

        half = self._bound // 2
        self._anchor = Anchor(
            self._clamp(math.floor(center_x) - half, extent_x - half),
            self._clamp(math.floor(center_y) - half, extent_y - half),
            zoom,
        )
        _LOGGER.debug(
            "New anchor (%s, %s) for (%s, %s) at zoom %d",
            self._anchor.x,
            self._anchor.y,
            center_x,
            center_y,
            zoom,
        )
        return (previous.x, previous.y) != (self._anchor.x, self._anchor.y)

    # ------------------------------------------------------------------
    @staticmethod
    def _clamp(value: float, upper: float) -> float:
        # Grids barely larger than the bound give a negative upper limit.
        upper = max(0.0, float(upper))
        return float(min(max(value, 0.0), upper))


__all__ = ["Anchor", "AnchorManager"]
