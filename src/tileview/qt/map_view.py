"""``QGraphicsView`` hosting a :class:`ViewportController`."""

from __future__ import annotations

import logging

from PySide6.QtCore import QPointF, QRectF, Qt, Signal
from PySide6.QtGui import QPainter
from PySide6.QtWidgets import QFrame, QGraphicsScene, QGraphicsView, QWidget

from tileview.core.controller import ViewportController
from tileview.errors import ZoomUnsupported
from tileview.errors.handler import ErrorHandler
from tileview.settings.view import ViewSettings
from tileview.sources.registry import MapSourceRegistry

from .frame_clock import QtFrameClock
from .input_handler import InputHandler
from .scene_surface import SceneDisplaySurface

_LOGGER = logging.getLogger(__name__)


class MapView(QGraphicsView):
    """Interactive slippy map.

    The scene is expressed in anchor-relative pixels, so the view only has to
    point its scene rectangle at the controller's viewport after every move.
    """

    centerChanged = Signal(float, float)
    zoomChanged = Signal(int)

    def __init__(
        self,
        registry: MapSourceRegistry,
        *,
        settings: ViewSettings | None = None,
        source_id: str | None = None,
        error_handler: ErrorHandler | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.setFrameShape(QFrame.NoFrame)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setRenderHint(QPainter.SmoothPixmapTransform, True)
        self.setTransformationAnchor(QGraphicsView.NoAnchor)
        self.setFocusPolicy(Qt.StrongFocus)

        self._scene = QGraphicsScene(self)
        self.setScene(self._scene)
        self._clock = QtFrameClock(timer_parent=self)
        self._controller = ViewportController(
            registry,
            SceneDisplaySurface(self._scene),
            source_id=source_id,
            clock=self._clock,
            settings=settings,
            error_handler=error_handler,
        )
        self._controller.center_changed.connect(self._handle_center_changed)
        self._controller.zoom_changed.connect(self._handle_zoom_changed)

        self._input = InputHandler(
            min_zoom=self._controller.min_zoom,
            max_zoom=self._controller.max_zoom,
            parent=self,
        )
        self._input.pan_requested.connect(self._handle_pan)
        self._input.scroll_requested.connect(self._handle_scroll)
        self._input.zoom_requested.connect(self._handle_zoom_at)
        self._input.zoom_step_requested.connect(self._handle_zoom_step)
        self._input.cursor_changed.connect(self.viewport().setCursor)
        self._input.cursor_reset.connect(self.viewport().unsetCursor)

    # ------------------------------------------------------------------
    @property
    def controller(self) -> ViewportController:
        return self._controller

    def shutdown(self) -> None:
        """Release tiles and stop any worker thread owned by the source."""

        self._controller.shutdown()
        source = self._controller.map_source
        if hasattr(source, "shutdown"):
            source.shutdown()

    # ------------------------------------------------------------------
    # Qt event handlers
    # ------------------------------------------------------------------
    def resizeEvent(self, event) -> None:  # noqa: N802 - Qt override
        super().resizeEvent(event)
        size = event.size()
        viewport = self._controller.viewport
        self._controller.set_visible_rect(viewport.x, viewport.y, size.width(), size.height())
        self._sync_scene_rect()

    def mousePressEvent(self, event) -> None:  # noqa: N802 - Qt override
        self._input.handle_mouse_press(event)
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event) -> None:  # noqa: N802 - Qt override
        self._input.handle_mouse_move(event)
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event) -> None:  # noqa: N802 - Qt override
        self._input.handle_mouse_release(event)
        super().mouseReleaseEvent(event)

    def wheelEvent(self, event) -> None:  # noqa: N802 - Qt override
        self._input.handle_wheel_event(event, self._controller.zoom)
        event.accept()

    def keyPressEvent(self, event) -> None:  # noqa: N802 - Qt override
        if not self._input.handle_key_press(event):
            super().keyPressEvent(event)

    # ------------------------------------------------------------------
    # Input slots
    # ------------------------------------------------------------------
    def _handle_pan(self, delta: QPointF) -> None:
        self._controller.stop_go_to()
        self._controller.scroll_by(-delta.x(), -delta.y())

    def _handle_scroll(self, direction: str) -> None:
        getattr(self._controller, f"scroll_{direction}")()

    def _handle_zoom_at(self, zoom: int, position: QPointF) -> None:
        try:
            self._controller.set_zoom_at(zoom, position.x(), position.y())
        except ZoomUnsupported as exc:
            _LOGGER.debug("Ignoring zoom request: %s", exc)

    def _handle_zoom_step(self, step: int) -> None:
        if step > 0:
            self._controller.zoom_in()
        else:
            self._controller.zoom_out()

    # ------------------------------------------------------------------
    # Controller notifications
    # ------------------------------------------------------------------
    def _handle_center_changed(self, latitude: float, longitude: float) -> None:
        self._sync_scene_rect()
        self.centerChanged.emit(latitude, longitude)

    def _handle_zoom_changed(self, zoom: int) -> None:
        self._input.set_zoom_range(self._controller.min_zoom, self._controller.max_zoom)
        self.zoomChanged.emit(zoom)

    def _sync_scene_rect(self) -> None:
        viewport = self._controller.viewport
        rect = QRectF(viewport.x, viewport.y, viewport.width, viewport.height)
        self.setSceneRect(rect)
        self.centerOn(rect.center())


__all__ = ["MapView"]
