"""Run a map source's fetches on a worker thread."""

from __future__ import annotations

import itertools
import logging
from typing import Any

from PySide6.QtCore import QObject, QThread, Signal, Slot

from tileview.core.map_source import FetchResult, MapSource, TileCallback
from tileview.errors import TileLoadingError

_LOGGER = logging.getLogger(__name__)


class _TileWorker(QObject):
    """Background worker that retrieves tiles without blocking the GUI."""

    tile_fetched = Signal(int, object)

    def __init__(self, source: MapSource) -> None:
        super().__init__()
        self._source = source

    @Slot(int, int, int, int)
    def request_tile(self, request_id: int, zoom: int, x: int, y: int) -> None:
        """Fetch a tile inside the worker thread and report the outcome."""

        def _deliver(result: FetchResult) -> None:
            self.tile_fetched.emit(request_id, result)

        try:
            self._source.fetch_tile(x, y, zoom, _deliver)
        except TileLoadingError as exc:
            _LOGGER.warning("Tile %s/%s/%s could not be loaded: %s", zoom, x, y, exc)
            _deliver(FetchResult.failure(exc))


class ThreadedTileSource(QObject):
    """Wrap a :class:`MapSource` so its fetches run on a ``QThread``.

    Geometry calls are forwarded directly.  Completion callbacks are invoked
    on the thread that owns this object, which keeps the viewport controller
    single threaded.
    """

    _request_tile = Signal(int, int, int, int)

    def __init__(self, source: MapSource, *, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._source = source
        self.id = source.id
        self.name = source.name
        self.license = source.license
        self.latitude_bounds = source.latitude_bounds
        self.longitude_bounds = source.longitude_bounds

        self._ids = itertools.count(1)
        self._pending: dict[int, TileCallback] = {}

        self._loader_thread: QThread | None = QThread(self)
        self._tile_worker = _TileWorker(source)
        self._tile_worker.moveToThread(self._loader_thread)
        self._tile_worker.tile_fetched.connect(self._handle_tile_fetched)
        self._request_tile.connect(self._tile_worker.request_tile)
        self._loader_thread.finished.connect(self._tile_worker.deleteLater)
        self._loader_thread.start()

    # ------------------------------------------------------------------
    def shutdown(self) -> None:
        """Stop the background worker thread and drop outstanding callbacks."""

        self._pending.clear()
        if self._loader_thread is None:
            return

        if self._loader_thread.isRunning():
            self._loader_thread.quit()
            self._loader_thread.wait()

        self._loader_thread = None

    # ------------------------------------------------------------------
    def fetch_tile(self, x: int, y: int, zoom: int, on_complete: TileCallback) -> None:
        if self._loader_thread is None:
            on_complete(FetchResult.failure(TileLoadingError("Tile loader has been shut down")))
            return
        request_id = next(self._ids)
        self._pending[request_id] = on_complete
        self._request_tile.emit(request_id, zoom, x, y)

    def pending_count(self) -> int:
        return len(self._pending)

    # ------------------------------------------------------------------
    def _handle_tile_fetched(self, request_id: int, result: Any) -> None:
        callback = self._pending.pop(request_id, None)
        if callback is None:
            return
        callback(result)

    # ------------------------------------------------------------------
    def project_x(self, zoom: int, longitude: float) -> float:
        return self._source.project_x(zoom, longitude)

    def project_y(self, zoom: int, latitude: float) -> float:
        return self._source.project_y(zoom, latitude)

    def unproject_x(self, zoom: int, x: float) -> float:
        return self._source.unproject_x(zoom, x)

    def unproject_y(self, zoom: int, y: float) -> float:
        return self._source.unproject_y(zoom, y)

    def tile_size(self, zoom: int) -> int:
        return self._source.tile_size(zoom)

    def min_zoom(self) -> int:
        return self._source.min_zoom()

    def max_zoom(self) -> int:
        return self._source.max_zoom()

    def grid_columns(self, zoom: int) -> int:
        return self._source.grid_columns(zoom)

    def grid_rows(self, zoom: int) -> int:
        return self._source.grid_rows(zoom)


__all__ = ["ThreadedTileSource"]
