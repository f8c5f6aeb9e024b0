"""Headless viewport engine: projection, tile grid, anchor and animation."""

from .anchor import Anchor, AnchorManager
from .clock import FrameClock, ManualFrameClock
from .map_source import FetchResult, MapSource
from .projection import Projection
from .surface import DisplaySurface, RecordingSurface
from .tile import Tile, TileState
from .viewport import TileRange, Viewport, compute_tile_range
from .zoom_level import ZoomLevel

__all__ = [
    "Anchor",
    "AnchorManager",
    "DisplaySurface",
    "FetchResult",
    "FrameClock",
    "ManualFrameClock",
    "MapSource",
    "Projection",
    "RecordingSurface",
    "Tile",
    "TileRange",
    "TileState",
    "Viewport",
    "ZoomLevel",
    "compute_tile_range",
]
