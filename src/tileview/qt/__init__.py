"""PySide6 hosts for the viewport engine."""

from .frame_clock import QtFrameClock
from .input_handler import InputHandler
from .map_view import MapView
from .scene_surface import SceneDisplaySurface
from .tile_loader import ThreadedTileSource

__all__ = [
    "InputHandler",
    "MapView",
    "QtFrameClock",
    "SceneDisplaySurface",
    "ThreadedTileSource",
]
