"""Translate Qt input events into viewport navigation requests."""

from __future__ import annotations

from PySide6.QtCore import QObject, QPointF, Qt, Signal

_SCROLL_KEYS = {
    Qt.Key_Left: "left",
    Qt.Key_Right: "right",
    Qt.Key_Up: "up",
    Qt.Key_Down: "down",
}


class InputHandler(QObject):
    """Turn mouse and keyboard gestures into pan, scroll and zoom requests."""

    pan_requested = Signal(QPointF)
    """Incremental drag delta in view pixels."""

    pan_finished = Signal()
    scroll_requested = Signal(str)
    zoom_requested = Signal(int, QPointF)
    """Target zoom level and the view position that must stay fixed."""

    zoom_step_requested = Signal(int)
    cursor_changed = Signal(Qt.CursorShape)
    cursor_reset = Signal()

    def __init__(self, *, min_zoom: int, max_zoom: int, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._min_zoom = min_zoom
        self._max_zoom = max_zoom
        self._dragging = False
        self._last_pos = QPointF()

    # ------------------------------------------------------------------
    def set_zoom_range(self, min_zoom: int, max_zoom: int) -> None:
        self._min_zoom = min_zoom
        self._max_zoom = max_zoom

    @property
    def is_dragging(self) -> bool:
        return self._dragging

    # ------------------------------------------------------------------
    def handle_mouse_press(self, event) -> None:
        if event.button() == Qt.LeftButton:
            self._dragging = True
            self._last_pos = event.position()
            self.cursor_changed.emit(Qt.ClosedHandCursor)

    def handle_mouse_move(self, event) -> None:
        if self._dragging and event.buttons() & Qt.LeftButton:
            position = event.position()
            delta = position - self._last_pos
            self._last_pos = position
            self.pan_requested.emit(delta)

    def handle_mouse_release(self, event) -> None:
        if event.button() == Qt.LeftButton and self._dragging:
            self._dragging = False
            self.pan_finished.emit()
            self.cursor_reset.emit()

    # ------------------------------------------------------------------
    def handle_wheel_event(self, event, current_zoom: int) -> None:
        """Request a single level step anchored at the cursor."""

        delta = event.angleDelta().y()
        if delta == 0:
            return
        target = current_zoom + (1 if delta > 0 else -1)
        if not self._min_zoom <= target <= self._max_zoom:
            return
        self.zoom_requested.emit(target, event.position())

    # ------------------------------------------------------------------
    def handle_key_press(self, event) -> bool:
        """Handle arrow and +/- keys; return ``True`` when the key was used."""

        key = event.key()
        direction = _SCROLL_KEYS.get(key)
        if direction is not None:
            self.scroll_requested.emit(direction)
            return True
        if key in (Qt.Key_Plus, Qt.Key_Equal):
            self.zoom_step_requested.emit(1)
            return True
        if key == Qt.Key_Minus:
            self.zoom_step_requested.emit(-1)
            return True
        return False


__all__ = ["InputHandler"]
