import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from tileview.core.clock import ManualFrameClock  # noqa: E402
from tileview.core.controller import ViewportController  # noqa: E402
from tileview.core.map_source import FetchResult  # noqa: E402
from tileview.core.surface import RecordingSurface  # noqa: E402
from tileview.errors import TileAccessError  # noqa: E402
from tileview.settings.view import ViewSettings  # noqa: E402
from tileview.sources.mercator import MercatorMapSource  # noqa: E402
from tileview.sources.registry import MapSourceRegistry  # noqa: E402


class FakeMapSource(MercatorMapSource):
    """Mercator source that records fetches and completes them on demand."""

    def __init__(self, source_id: str = "fake", *, synchronous: bool = False, **kwargs) -> None:
        super().__init__(source_id, f"Fake {source_id}", **kwargs)
        self.synchronous = synchronous
        self.requests: list[tuple[int, int, int]] = []
        self.pending: dict[tuple[int, int, int], list] = {}

    def fetch_tile(self, x, y, zoom, on_complete) -> None:
        key = (zoom, x, y)
        self.requests.append(key)
        if self.synchronous:
            on_complete(FetchResult.success(f"image-{zoom}-{x}-{y}"))
            return
        self.pending.setdefault(key, []).append(on_complete)

    def complete(self, zoom: int, x: int, y: int) -> None:
        for callback in self.pending.pop((zoom, x, y)):
            callback(FetchResult.success(f"image-{zoom}-{x}-{y}"))

    def fail(self, zoom: int, x: int, y: int) -> None:
        for callback in self.pending.pop((zoom, x, y)):
            callback(FetchResult.failure(TileAccessError(f"{zoom}/{x}/{y} missing")))

    def complete_all(self) -> None:
        for zoom, x, y in list(self.pending):
            self.complete(zoom, x, y)


@pytest.fixture
def source() -> FakeMapSource:
    return FakeMapSource()


@pytest.fixture
def registry(source: FakeMapSource) -> MapSourceRegistry:
    registry = MapSourceRegistry()
    registry.register_instance(source)
    return registry


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def clock() -> ManualFrameClock:
    return ManualFrameClock()


@pytest.fixture
def make_controller(registry, surface, clock):
    def _make(zoom: int = 3, width: float = 800, height: float = 600, **options) -> ViewportController:
        settings = ViewSettings(initial_zoom=zoom, source_id="fake", **options)
        controller = ViewportController(registry, surface, clock=clock, settings=settings)
        controller.set_visible_rect(0, 0, width, height)
        return controller

    return _make
