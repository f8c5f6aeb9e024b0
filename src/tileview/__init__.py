"""Slippy-map viewport engine."""

from .core.controller import ReconcileResult, ViewportController
from .core.go_to import GoToAnimation
from .errors import TileViewError
from .settings.view import ViewSettings
from .sources.registry import MapSourceRegistry, create_default_registry

__version__ = "0.1.0"

__all__ = [
    "GoToAnimation",
    "MapSourceRegistry",
    "ReconcileResult",
    "TileViewError",
    "ViewSettings",
    "ViewportController",
    "__version__",
    "create_default_registry",
]
