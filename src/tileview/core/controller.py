"""Viewport state machine tying projection, tile grid, anchor and animation together."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from functools import partial
from typing import TYPE_CHECKING, Any, Iterable, Optional

from tileview.config import ENSURE_VISIBLE_PADDING, KINETIC_SCROLL_DURATION_MS, SCROLL_MODES
from tileview.errors import TileLoadingError, ZoomUnsupported
from tileview.errors.handler import ErrorHandler, ErrorSeverity
from tileview.settings.view import ViewSettings
from tileview.utils.signal import Signal

from .anchor import Anchor, AnchorManager
from .clock import FrameClock
from .easing import easing_by_name
from .go_to import GoToAnimation, default_go_to_duration
from .map_source import FetchResult, MapSource
from .projection import Projection
from .surface import DisplaySurface
from .tasks import DeferredTaskQueue
from .tile import Tile, TileState
from .viewport import TileRange, Viewport, compute_tile_range
from .zoom_level import ZoomLevel

if TYPE_CHECKING:
    from tileview.sources.registry import MapSourceRegistry

_LOGGER = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """What a reconciliation pass changed."""

    requested: list[tuple[int, int]] = field(default_factory=list)
    evicted: list[tuple[int, int]] = field(default_factory=list)
    tile_range: Optional[TileRange] = None

    def merge(self, other: "ReconcileResult") -> "ReconcileResult":
        return ReconcileResult(
            requested=self.requested + other.requested,
            evicted=self.evicted + other.evicted,
            tile_range=other.tile_range or self.tile_range,
        )


class ViewportController:
    """Keep the tiles of one zoom level in sync with a visible rectangle.

    The controller owns the viewport origin, the current zoom level grid, the
    anchor and the go-to animation.  Rendering is delegated to a
    :class:`DisplaySurface` and tile bytes to the current :class:`MapSource`;
    neither is touched outside the controller's own thread of control.

    Operations that need a grid are no-ops until the view has been centred
    once, either explicitly or through :meth:`go_to`/:meth:`ensure_visible`.
    """

    def __init__(
        self,
        registry: "MapSourceRegistry",
        surface: DisplaySurface,
        *,
        source_id: str | None = None,
        clock: FrameClock | None = None,
        settings: ViewSettings | None = None,
        error_handler: ErrorHandler | None = None,
    ) -> None:
        self._settings = settings or ViewSettings()
        self._registry = registry
        self._surface = surface
        self._errors = error_handler or ErrorHandler(_LOGGER)

        self._source: MapSource = registry.get(source_id or self._settings.source_id)
        self._projection = Projection(self._source)
        self._min_zoom, self._max_zoom = self._zoom_range_for(self._source)
        self._zoom = min(max(self._settings.initial_zoom, self._min_zoom), self._max_zoom)

        self._level: ZoomLevel | None = None
        self._anchor = AnchorManager(
            threshold=self._settings.anchor_threshold,
            bound=self._settings.representable_bound,
        )
        self._viewport = Viewport()
        self._latitude = 0.0
        self._longitude = 0.0
        self._state = TileState.INIT
        self._keep_center_on_resize = self._settings.keep_center_on_resize
        self._scroll_mode = self._settings.scroll_mode

        self._tasks = DeferredTaskQueue()
        self._reconciling = False
        self._reconcile_pending = False
        self._queued_rect: tuple[float, float, float, float] | None = None

        self.center_changed = Signal()
        """Emitted with ``(latitude, longitude)`` whenever the centre moves."""

        self.zoom_changed = Signal()
        self.state_changed = Signal()
        self.animation_completed = Signal()
        self.animation_stopped = Signal()
        self.animation_ended = Signal()

        self.tile_failed = Signal()
        """Emitted with ``(tile, error)`` when a fetch completes with an error."""

        self._go_to = GoToAnimation(
            self._center_on,
            clock,
            easing=easing_by_name(self._settings.easing),
        )
        self._go_to.completed.connect(self.animation_completed.emit)
        self._go_to.stopped.connect(self.animation_stopped.emit)
        self._go_to.ended.connect(self.animation_ended.emit)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def latitude(self) -> float:
        return self._latitude

    @property
    def longitude(self) -> float:
        return self._longitude

    @property
    def center(self) -> tuple[float, float]:
        return self._latitude, self._longitude

    @property
    def zoom(self) -> int:
        return self._zoom

    @property
    def min_zoom(self) -> int:
        return self._min_zoom

    @property
    def max_zoom(self) -> int:
        return self._max_zoom

    @property
    def state(self) -> TileState:
        return self._state

    @property
    def anchor(self) -> Anchor:
        return self._anchor.anchor

    @property
    def viewport(self) -> Viewport:
        """Return a copy of the anchor-relative viewport."""

        return replace(self._viewport)

    @property
    def zoom_level(self) -> ZoomLevel | None:
        return self._level

    @property
    def map_source(self) -> MapSource:
        return self._source

    @property
    def projection(self) -> Projection:
        return self._projection

    @property
    def surface(self) -> DisplaySurface:
        return self._surface

    @property
    def error_handler(self) -> ErrorHandler:
        return self._errors

    @property
    def is_animating(self) -> bool:
        return self._go_to.is_running

    @property
    def animation(self) -> GoToAnimation:
        return self._go_to

    @property
    def keep_center_on_resize(self) -> bool:
        return self._keep_center_on_resize

    @keep_center_on_resize.setter
    def keep_center_on_resize(self, value: bool) -> None:
        self._keep_center_on_resize = bool(value)

    @property
    def scroll_mode(self) -> str:
        return self._scroll_mode

    @scroll_mode.setter
    def scroll_mode(self, mode: str) -> None:
        if mode not in SCROLL_MODES:
            raise ValueError(f"Unknown scroll mode '{mode}'")
        self._scroll_mode = mode

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------
    def reconcile(self) -> ReconcileResult:
        """Bring the tiles of the current level in line with the viewport."""

        level = self._level
        if level is None:
            return ReconcileResult()
        if self._reconciling:
            self._reconcile_pending = True
            return ReconcileResult()

        self._reconciling = True
        try:
            result = self._load_visible_tiles(level)
            self._update_state()
            self._tasks.drain()
        finally:
            self._reconciling = False

        if self._reconcile_pending:
            self._reconcile_pending = False
            result = result.merge(self.reconcile())
        self._apply_queued_rect()
        return result

    # ------------------------------------------------------------------
    def reposition_tiles(self) -> None:
        """Place every tile holding a renderable at its anchor-relative offset."""

        if self._level is None:
            return
        for tile in self._level.tiles():
            self._position_tile(tile)

    # ------------------------------------------------------------------
    def _load_visible_tiles(self, level: ZoomLevel) -> ReconcileResult:
        size = level.tile_size
        anchor = self._anchor.anchor
        tile_range = compute_tile_range(self._viewport, anchor, size, level.columns, level.rows)
        _LOGGER.debug(
            "Range %d, %d to %d, %d",
            tile_range.first_x,
            tile_range.first_y,
            tile_range.end_x,
            tile_range.end_y,
        )

        evicted: list[tuple[int, int]] = []
        for tile in level.tiles():
            if not tile_range.keeps(tile.x, tile.y):
                level.remove_tile(tile.x, tile.y)
                evicted.append(tile.key)

        center_x, center_y = self._viewport.raw_center(anchor)
        missing = [cell for cell in tile_range.cells() if cell not in level]
        missing.sort(
            key=lambda cell: ((cell[0] + 0.5) * size - center_x) ** 2
            + ((cell[1] + 0.5) * size - center_y) ** 2
        )
        for x, y in missing:
            self._load_tile(level, x, y)

        return ReconcileResult(requested=missing, evicted=evicted, tile_range=tile_range)

    # ------------------------------------------------------------------
    def _load_tile(self, level: ZoomLevel, x: int, y: int) -> None:
        tile = level.add_tile(x, y)
        renderable = self._surface.create_placeholder(tile)
        tile.renderable = renderable
        self._surface.set_size(renderable, tile.size, tile.size)
        self._surface.attach(renderable, level.group)
        self._position_tile(tile)
        tile.state = TileState.LOADING

        _LOGGER.debug("Loading tile %d, %d, %d", level.level, x, y)
        callback = partial(self._on_tile_fetched, level, tile)
        try:
            self._source.fetch_tile(x, y, level.level, callback)
        except (TileLoadingError, OSError) as exc:
            callback(FetchResult.failure(exc))

    # ------------------------------------------------------------------
    def _on_tile_fetched(self, level: ZoomLevel, tile: Tile, result: FetchResult) -> None:
        if self._level is not level or level.get_tile(tile.x, tile.y) is not tile:
            _LOGGER.debug("Discarding fetch result for evicted %r", tile)
            return

        if result.ok:
            tile.state = TileState.DONE
            self._surface.set_image(tile.renderable, result.image)
        else:
            tile.state = TileState.ERROR
            self._surface.show_error(tile.renderable)
            self._errors.handle(
                result.error,
                ErrorSeverity.WARNING,
                {"zoom": tile.zoom, "x": tile.x, "y": tile.y},
            )
            self.tile_failed.emit(tile, result.error)

        self._tasks.defer(("position", tile.zoom, tile.key), partial(self._position_tile, tile))
        self._tasks.defer("state", self._update_state)
        if not self._reconciling:
            self._tasks.drain()

    # ------------------------------------------------------------------
    def _position_tile(self, tile: Tile) -> None:
        if tile.renderable is None:
            return
        anchor = self._anchor.anchor
        self._surface.set_position(
            tile.renderable,
            tile.x * tile.size - anchor.x,
            tile.y * tile.size - anchor.y,
        )

    # ------------------------------------------------------------------
    def _update_state(self) -> None:
        if self._level is None:
            return
        loading = any(tile.state is TileState.LOADING for tile in self._level.tiles())
        new_state = TileState.LOADING if loading else TileState.DONE
        if new_state is not self._state:
            self._state = new_state
            self.state_changed.emit(new_state)

    # ------------------------------------------------------------------
    def _refresh(self) -> None:
        self.reconcile()
        self.reposition_tiles()

    # ------------------------------------------------------------------
    # Zoom level lifecycle
    # ------------------------------------------------------------------
    def _zoom_range_for(self, source: MapSource) -> tuple[int, int]:
        low, high = source.min_zoom(), source.max_zoom()
        if self._settings.min_zoom is not None:
            low = max(low, self._settings.min_zoom)
        if self._settings.max_zoom is not None:
            high = min(high, self._settings.max_zoom)
        if low > high:
            _LOGGER.warning(
                "Configured zoom range does not overlap [%d, %d] of %s",
                source.min_zoom(),
                source.max_zoom(),
                source.id,
            )
            return source.min_zoom(), source.max_zoom()
        return low, high

    # ------------------------------------------------------------------
    def _create_level(self, zoom: int) -> ZoomLevel:
        level = ZoomLevel(
            zoom,
            self._source.grid_columns(zoom),
            self._source.grid_rows(zoom),
            self._source.tile_size(zoom),
        )
        level.on_release = partial(self._release_renderable, level)
        level.group = self._surface.create_group(zoom)
        return level

    def _release_renderable(self, level: ZoomLevel, tile: Tile, renderable: Any) -> None:
        self._surface.detach(renderable, level.group)

    # ------------------------------------------------------------------
    def _install_level(self, zoom: int) -> None:
        """Replace the current grid with a fresh one for *zoom*."""

        level = self._create_level(zoom)
        self._drop_level()
        self._level = level
        self._zoom = zoom
        self._surface.attach(level.group, None)

    def _drop_level(self) -> None:
        level = self._level
        if level is None:
            return
        self._level = None
        level.clear()
        self._surface.detach(level.group, None)
        self._tasks.clear()

    # ------------------------------------------------------------------
    def _check_zoom(self, zoom: int) -> None:
        if not self._min_zoom <= zoom <= self._max_zoom:
            raise ZoomUnsupported(
                f"Zoom {zoom} is outside [{self._min_zoom}, {self._max_zoom}]"
            )
        if zoom == self._zoom:
            raise ZoomUnsupported(f"Already at zoom {zoom}")

    # ------------------------------------------------------------------
    # Centring and scrolling
    # ------------------------------------------------------------------
    def center_on(self, latitude: float, longitude: float) -> None:
        """Centre the view on a coordinate, cancelling any go-to animation."""

        latitude, longitude = self._projection.validate(latitude, longitude)
        self.stop_go_to()
        self._center_on(latitude, longitude)

    def _center_on(self, latitude: float, longitude: float) -> None:
        latitude, longitude = self._projection.validate(latitude, longitude)
        if self._level is None:
            self._install_level(self._zoom)

        x, y = self._projection.to_pixels(self._zoom, latitude, longitude)
        viewport = self._viewport
        self._anchor.update_anchor(
            self._zoom,
            x,
            y,
            viewport.width,
            viewport.height,
            self._projection.grid_extent(self._zoom),
        )
        anchor = self._anchor.anchor
        viewport.x = x - anchor.x - viewport.width / 2.0
        viewport.y = y - anchor.y - viewport.height / 2.0
        self._latitude = latitude
        self._longitude = longitude

        self._refresh()
        self.center_changed.emit(self._latitude, self._longitude)

    # ------------------------------------------------------------------
    def set_visible_rect(self, x: float, y: float, width: float, height: float) -> None:
        """Apply a host scroll or resize of the visible rectangle.

        ``x``/``y`` are anchor-relative like :attr:`viewport`.  While a
        reconciliation pass runs the request is held back and applied once the
        pass is over; only the latest request survives.
        """

        if width < 0 or height < 0:
            raise ValueError(f"Viewport size must not be negative, got {width}x{height}")
        if self._reconciling:
            self._queued_rect = (x, y, width, height)
            return

        viewport = self._viewport
        resized = (width, height) != (viewport.width, viewport.height)
        viewport.width = float(width)
        viewport.height = float(height)
        if self._level is None:
            viewport.x = float(x)
            viewport.y = float(y)
            return

        if resized and self._keep_center_on_resize:
            self._center_on(self._latitude, self._longitude)
            return
        self._scroll_to(x, y, force=resized)

    def _apply_queued_rect(self) -> None:
        queued = self._queued_rect
        if queued is None:
            return
        self._queued_rect = None
        self.set_visible_rect(*queued)

    # ------------------------------------------------------------------
    def scroll_by(self, dx: float, dy: float) -> None:
        """Move the viewport origin by ``(dx, dy)`` pixels."""

        viewport = self._viewport
        self.set_visible_rect(viewport.x + dx, viewport.y + dy, viewport.width, viewport.height)

    # ------------------------------------------------------------------
    def _scroll_to(self, x: float, y: float, *, force: bool = False) -> None:
        viewport = self._viewport
        x, y = self._clamp_origin(float(x), float(y))
        if not force and (x, y) == (viewport.x, viewport.y):
            return

        previous = self._anchor.anchor
        center_x = x + previous.x + viewport.width / 2.0
        center_y = y + previous.y + viewport.height / 2.0
        if self._anchor.update_anchor(
            self._zoom,
            center_x,
            center_y,
            viewport.width,
            viewport.height,
            self._projection.grid_extent(self._zoom),
        ):
            current = self._anchor.anchor
            dx = current.x - previous.x
            dy = current.y - previous.y
            _LOGGER.debug("Relocating the viewport by %f, %f", dx, dy)
            x -= dx
            y -= dy

        viewport.x = x
        viewport.y = y
        self._latitude, self._longitude = self._projection.clamp(
            *self._projection.to_coords(self._zoom, center_x, center_y)
        )
        self._refresh()
        self.center_changed.emit(self._latitude, self._longitude)

    def _clamp_origin(self, x: float, y: float) -> tuple[float, float]:
        """Keep the raw view centre on the grid."""

        anchor = self._anchor.anchor
        viewport = self._viewport
        extent_x, extent_y = self._projection.grid_extent(self._zoom)
        half_w = viewport.width / 2.0
        half_h = viewport.height / 2.0
        x = min(max(x, -anchor.x - half_w), extent_x - anchor.x - half_w)
        y = min(max(y, -anchor.y - half_h), extent_y - anchor.y - half_h)
        return x, y

    # ------------------------------------------------------------------
    def scroll_left(self) -> None:
        self._scroll_towards(-self._viewport.width / 4.0, 0.0)

    def scroll_right(self) -> None:
        self._scroll_towards(self._viewport.width / 4.0, 0.0)

    def scroll_up(self) -> None:
        self._scroll_towards(0.0, -self._viewport.height / 4.0)

    def scroll_down(self) -> None:
        self._scroll_towards(0.0, self._viewport.height / 4.0)

    def _scroll_towards(self, dx: float, dy: float) -> None:
        if self._level is None:
            return
        x, y = self._projection.to_pixels(self._zoom, self._latitude, self._longitude)
        extent_x, extent_y = self._projection.grid_extent(self._zoom)
        x = min(max(x + dx, 0.0), extent_x)
        y = min(max(y + dy, 0.0), extent_y)
        if self._scroll_mode == "kinetic":
            latitude, longitude = self._projection.clamp(*self._projection.to_coords(self._zoom, x, y))
            self.go_to(latitude, longitude, KINETIC_SCROLL_DURATION_MS)
            return
        anchor = self._anchor.anchor
        viewport = self._viewport
        self._scroll_to(
            x - anchor.x - viewport.width / 2.0,
            y - anchor.y - viewport.height / 2.0,
        )

    # ------------------------------------------------------------------
    def coords_at(self, screen_x: float, screen_y: float) -> tuple[float, float]:
        """Return the ``(latitude, longitude)`` under a point of the view."""

        anchor = self._anchor.anchor
        viewport = self._viewport
        return self._projection.to_coords(
            self._zoom,
            viewport.x + anchor.x + screen_x,
            viewport.y + anchor.y + screen_y,
        )

    def screen_position(self, latitude: float, longitude: float) -> tuple[float, float]:
        """Return where a coordinate falls relative to the view's top-left corner."""

        x, y = self._projection.to_pixels(self._zoom, latitude, longitude)
        anchor = self._anchor.anchor
        viewport = self._viewport
        return x - anchor.x - viewport.x, y - anchor.y - viewport.y

    # ------------------------------------------------------------------
    # Zoom
    # ------------------------------------------------------------------
    def set_zoom(self, zoom: int) -> bool:
        """Switch to *zoom* keeping the current centre.

        Returns ``False`` before the first centring.  Out-of-range or
        unchanged requests raise :class:`ZoomUnsupported` without touching
        any state.
        """

        if self._level is None:
            return False
        self._check_zoom(zoom)
        self.stop_go_to()

        latitude, longitude = self._latitude, self._longitude
        _LOGGER.debug("Zooming from %d to %d", self._zoom, zoom)
        self._install_level(zoom)
        self._center_on(latitude, longitude)
        self.zoom_changed.emit(zoom)
        return True

    def zoom_in(self) -> bool:
        try:
            return self.set_zoom(self._zoom + 1)
        except ZoomUnsupported:
            return False

    def zoom_out(self) -> bool:
        try:
            return self.set_zoom(self._zoom - 1)
        except ZoomUnsupported:
            return False

    # ------------------------------------------------------------------
    def set_zoom_at(self, zoom: int, screen_x: float, screen_y: float) -> bool:
        """Switch to *zoom* keeping the coordinate under ``(screen_x, screen_y)`` fixed."""

        if self._level is None:
            return False
        self._check_zoom(zoom)
        self.stop_go_to()

        latitude, longitude = self._projection.clamp(*self.coords_at(screen_x, screen_y))
        x_diff = self._viewport.width / 2.0 - screen_x
        y_diff = self._viewport.height / 2.0 - screen_y

        self._install_level(zoom)
        x, y = self._projection.to_pixels(zoom, latitude, longitude)
        latitude, longitude = self._projection.clamp(
            *self._projection.to_coords(zoom, x + x_diff, y + y_diff)
        )
        self._center_on(latitude, longitude)
        self.zoom_changed.emit(zoom)
        return True

    # ------------------------------------------------------------------
    def set_min_zoom(self, zoom: int) -> bool:
        """Raise or lower the smallest allowed zoom within the source's range."""

        if zoom == self._min_zoom or zoom > self._max_zoom or zoom < self._source.min_zoom():
            return False
        self._min_zoom = zoom
        if self._zoom < zoom:
            self._force_zoom(zoom)
        return True

    def set_max_zoom(self, zoom: int) -> bool:
        """Raise or lower the largest allowed zoom within the source's range."""

        if zoom == self._max_zoom or zoom < self._min_zoom or zoom > self._source.max_zoom():
            return False
        self._max_zoom = zoom
        if self._zoom > zoom:
            self._force_zoom(zoom)
        return True

    def _force_zoom(self, zoom: int) -> None:
        if self._level is None:
            self._zoom = zoom
            self.zoom_changed.emit(zoom)
            return
        self.set_zoom(zoom)

    # ------------------------------------------------------------------
    # Map source
    # ------------------------------------------------------------------
    def set_map_source(self, source_id: str) -> None:
        """Switch to another registered source, rebuilding the grid."""

        source = self._registry.get(source_id)
        if source is self._source:
            return
        self.stop_go_to()

        self._source = source
        self._projection = Projection(source)
        self._min_zoom, self._max_zoom = self._zoom_range_for(source)
        zoom = min(max(self._zoom, self._min_zoom), self._max_zoom)
        zoom_changed = zoom != self._zoom
        _LOGGER.info("Switching map source to %s", source.id)

        if self._level is None:
            self._zoom = zoom
        else:
            self._anchor.reset()
            self._install_level(zoom)
            latitude, longitude = self._projection.clamp(self._latitude, self._longitude)
            self._center_on(latitude, longitude)
        if zoom_changed:
            self.zoom_changed.emit(zoom)

    # ------------------------------------------------------------------
    # Animation
    # ------------------------------------------------------------------
    def go_to(self, latitude: float, longitude: float, duration_ms: int | None = None) -> None:
        """Animate the centre towards a coordinate.

        *duration_ms* defaults to a value growing with the zoom level; zero
        (or a controller built without a clock) centres immediately.
        """

        latitude, longitude = self._projection.validate(latitude, longitude)
        if duration_ms is None:
            duration_ms = default_go_to_duration(self._zoom)
        self._go_to.start(self._latitude, self._longitude, latitude, longitude, duration_ms)

    def stop_go_to(self) -> bool:
        return self._go_to.stop()

    # ------------------------------------------------------------------
    def ensure_visible(
        self,
        lat1: float,
        lon1: float,
        lat2: float,
        lon2: float,
        animate: bool = False,
    ) -> None:
        """Fit the box spanned by two corners into the view."""

        lat1, lon1 = self._projection.validate(lat1, lon1)
        lat2, lon2 = self._projection.validate(lat2, lon2)
        min_lat, max_lat = sorted((lat1, lat2))
        min_lon, max_lon = sorted((lon1, lon2))
        center_lat = (min_lat + max_lat) / 2.0
        center_lon = (min_lon + max_lon) / 2.0

        width = self._viewport.width
        height = self._viewport.height
        for zoom in range(self._zoom, self._min_zoom - 1, -1):
            left, top = self._projection.to_pixels(zoom, max_lat, min_lon)
            right, bottom = self._projection.to_pixels(zoom, min_lat, max_lon)
            span_w = (right - left) * ENSURE_VISIBLE_PADDING
            span_h = (bottom - top) * ENSURE_VISIBLE_PADDING
            if span_w <= width and span_h <= height:
                _LOGGER.debug("Box fits at zoom %d", zoom)
                self._show(zoom, center_lat, center_lon, animate)
                return

        _LOGGER.debug("Box does not fit at any zoom, showing the whole map")
        self._show(self._min_zoom, 0.0, 0.0, animate)

    def ensure_markers_visible(
        self, points: Iterable[tuple[float, float]], animate: bool = False
    ) -> None:
        """Fit every ``(latitude, longitude)`` in *points* into the view."""

        points = list(points)
        if not points:
            return
        latitudes = [lat for lat, _ in points]
        longitudes = [lon for _, lon in points]
        self.ensure_visible(
            min(latitudes), min(longitudes), max(latitudes), max(longitudes), animate
        )

    def _show(self, zoom: int, latitude: float, longitude: float, animate: bool) -> None:
        if self._level is None:
            self._zoom = zoom
        elif zoom != self._zoom:
            self.set_zoom(zoom)
        if animate:
            self.go_to(latitude, longitude)
        else:
            self.center_on(latitude, longitude)

    # ------------------------------------------------------------------
    def shutdown(self) -> None:
        """Cancel the animation and release every tile of the current level."""

        self.stop_go_to()
        self._drop_level()
        self._queued_rect = None
        self._state = TileState.INIT


__all__ = ["ReconcileResult", "ViewportController"]
