"""Raster tiles read from a local ``{z}/{x}/{y}.png`` directory hierarchy.

The source decodes tiles with Pillow and keeps a small LRU cache so that
panning back and forth does not hit the disk for tiles that were just shown.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from threading import Lock

from PIL import Image, UnidentifiedImageError

from tileview.config import MAX_ZOOM, MIN_ZOOM, TILE_SIZE
from tileview.core.map_source import FetchResult, TileCallback
from tileview.errors import TileAccessError, TileDecodeError, TileLoadingError

from .mercator import MercatorMapSource

_LOGGER = logging.getLogger(__name__)


class FileTileSource(MercatorMapSource):
    """Serve XYZ raster tiles from a folder.

    Parameters
    ----------
    tile_root:
        Path to the folder that contains the ``{z}/{x}/{y}.<extension>``
        hierarchy.
    cache_size:
        Maximum number of decoded tiles to retain in memory.
    """

    def __init__(
        self,
        tile_root: Path | str,
        *,
        source_id: str = "file",
        name: str = "Local tiles",
        license: str = "",
        extension: str = "png",
        min_zoom: int = MIN_ZOOM,
        max_zoom: int = MAX_ZOOM,
        tile_size: int = TILE_SIZE,
        cache_size: int = 256,
    ) -> None:
        super().__init__(
            source_id,
            name,
            license=license,
            min_zoom=min_zoom,
            max_zoom=max_zoom,
            tile_size=tile_size,
        )
        self.tile_root = Path(tile_root)
        if not self.tile_root.exists():
            raise TileAccessError(f"Tile directory '{self.tile_root}' does not exist")
        if not self.tile_root.is_dir():
            raise TileAccessError(f"Tile path '{self.tile_root}' is not a directory")
        self.extension = extension.lstrip(".")
        self._cached_loader = lru_cache(maxsize=cache_size)(self._load_tile)
        # ``functools.lru_cache`` is not thread-safe on its own and tiles may
        # be requested from worker threads.
        self._lock = Lock()

    # ------------------------------------------------------------------
    def load_tile(self, zoom: int, x: int, y: int) -> Image.Image:
        """Return the decoded tile or raise :class:`TileLoadingError`."""

        with self._lock:
            return self._cached_loader(zoom, x, y)

    # ------------------------------------------------------------------
    def fetch_tile(self, x: int, y: int, zoom: int, on_complete: TileCallback) -> None:
        try:
            image = self.load_tile(zoom, x, y)
        except TileLoadingError as exc:
            _LOGGER.debug("Tile %d/%d/%d unavailable: %s", zoom, x, y, exc)
            on_complete(FetchResult.failure(exc))
            return
        on_complete(FetchResult.success(image))

    # ------------------------------------------------------------------
    def clear_cache(self) -> None:
        """Completely empty the internal cache."""

        with self._lock:
            self._cached_loader.cache_clear()

    # ------------------------------------------------------------------
    def tile_path(self, zoom: int, x: int, y: int) -> Path:
        return self.tile_root / str(zoom) / str(x) / f"{y}.{self.extension}"

    # ------------------------------------------------------------------
    def _load_tile(self, zoom: int, x: int, y: int) -> Image.Image:
        path = self.tile_path(zoom, x, y)
        if not path.is_file():
            raise TileAccessError(f"Tile {zoom}/{x}/{y} is missing from '{self.tile_root}'")

        try:
            with Image.open(path) as handle:
                image = handle.convert("RGBA")
        except UnidentifiedImageError as exc:
            raise TileDecodeError(f"Failed to decode tile {zoom}/{x}/{y}") from exc
        except OSError as exc:
            raise TileAccessError(f"Unable to read tile {zoom}/{x}/{y} from disk") from exc
        return image


__all__ = ["FileTileSource"]
