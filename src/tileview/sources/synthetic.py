"""In-memory debug tiles showing their own grid coordinate."""

from __future__ import annotations

from functools import lru_cache

from PIL import Image, ImageDraw

from tileview.config import MAX_ZOOM, MIN_ZOOM, TILE_SIZE
from tileview.core.map_source import FetchResult, TileCallback

from .mercator import MercatorMapSource

_LIGHT = (236, 240, 244, 255)
_DARK = (214, 222, 230, 255)
_INK = (64, 72, 84, 255)


class SyntheticTileSource(MercatorMapSource):
    """Generate checkerboard tiles labelled ``z/x/y``.

    Every fetch completes synchronously, which makes the source convenient
    for the command line tools and for exercising the viewport without any
    tile data on disk.
    """

    def __init__(
        self,
        *,
        source_id: str = "synthetic",
        name: str = "Synthetic grid",
        min_zoom: int = MIN_ZOOM,
        max_zoom: int = MAX_ZOOM,
        tile_size: int = TILE_SIZE,
        cache_size: int = 128,
    ) -> None:
        super().__init__(
            source_id,
            name,
            license="Generated tiles",
            min_zoom=min_zoom,
            max_zoom=max_zoom,
            tile_size=tile_size,
        )
        self._render = lru_cache(maxsize=cache_size)(self._render_tile)

    # ------------------------------------------------------------------
    def fetch_tile(self, x: int, y: int, zoom: int, on_complete: TileCallback) -> None:
        on_complete(FetchResult.success(self._render(zoom, x, y)))

    # ------------------------------------------------------------------
    def _render_tile(self, zoom: int, x: int, y: int) -> Image.Image:
        size = self._tile_size
        fill = _LIGHT if (x + y) % 2 == 0 else _DARK
        image = Image.new("RGBA", (size, size), fill)
        draw = ImageDraw.Draw(image)
        draw.rectangle((0, 0, size - 1, size - 1), outline=_INK)
        draw.text((8, 8), f"{zoom}/{x}/{y}", fill=_INK)
        return image


__all__ = ["SyntheticTileSource"]
