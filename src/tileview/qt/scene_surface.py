"""Display surface placing tiles into a ``QGraphicsScene``."""

from __future__ import annotations

import logging
from typing import Any

from PIL import Image
from PIL.ImageQt import ImageQt
from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QImage, QPainter, QPen, QPixmap
from PySide6.QtWidgets import QGraphicsItem, QGraphicsPixmapItem, QGraphicsRectItem, QGraphicsScene

from tileview.core.tile import Tile

_LOGGER = logging.getLogger(__name__)

_PLACEHOLDER_COLOR = QColor(228, 232, 236)
_ERROR_COLOR = QColor(246, 222, 222)
_ERROR_INK = QColor(196, 64, 64)


def _to_pixmap(image: Any) -> QPixmap:
    """Convert a Pillow image or Qt image into a pixmap."""

    if isinstance(image, QPixmap):
        return image
    if isinstance(image, QImage):
        return QPixmap.fromImage(image)
    if isinstance(image, Image.Image):
        # ``ImageQt`` wraps the Pillow buffer, copy before it goes away.
        return QPixmap.fromImage(ImageQt(image.convert("RGBA")).copy())
    raise TypeError(f"Unsupported tile image type {type(image).__name__}")


class SceneDisplaySurface:
    """Map viewport renderables onto graphics items.

    Groups are pen-less rectangle items used as parents so that dropping a
    zoom level removes all of its tiles in one call.
    """

    def __init__(self, scene: QGraphicsScene) -> None:
        self._scene = scene

    @property
    def scene(self) -> QGraphicsScene:
        return self._scene

    # ------------------------------------------------------------------
    def create_group(self, zoom: int) -> QGraphicsItem:
        group = QGraphicsRectItem()
        group.setPen(Qt.NoPen)
        group.setZValue(zoom)
        group.setData(0, f"level-{zoom}")
        return group

    # ------------------------------------------------------------------
    def create_placeholder(self, tile: Tile) -> QGraphicsPixmapItem:
        pixmap = QPixmap(tile.size, tile.size)
        pixmap.fill(_PLACEHOLDER_COLOR)
        item = QGraphicsPixmapItem(pixmap)
        item.setData(0, f"{tile.zoom}/{tile.x}/{tile.y}")
        return item

    # ------------------------------------------------------------------
    def set_image(self, renderable: QGraphicsPixmapItem, image: Any) -> None:
        renderable.setPixmap(_to_pixmap(image))

    # ------------------------------------------------------------------
    def show_error(self, renderable: QGraphicsPixmapItem) -> None:
        size = renderable.pixmap().size()
        pixmap = QPixmap(size)
        pixmap.fill(_ERROR_COLOR)
        painter = QPainter(pixmap)
        try:
            painter.setPen(QPen(_ERROR_INK, 2))
            painter.drawLine(0, 0, size.width(), size.height())
            painter.drawLine(size.width(), 0, 0, size.height())
        finally:
            painter.end()
        renderable.setPixmap(pixmap)

    # ------------------------------------------------------------------
    def attach(self, renderable: QGraphicsItem, parent: QGraphicsItem | None) -> None:
        if parent is None:
            if renderable.scene() is not self._scene:
                self._scene.addItem(renderable)
            return
        renderable.setParentItem(parent)

    # ------------------------------------------------------------------
    def detach(self, renderable: QGraphicsItem, parent: QGraphicsItem | None) -> None:
        if parent is not None and renderable.parentItem() is parent:
            renderable.setParentItem(None)
        if renderable.scene() is self._scene:
            self._scene.removeItem(renderable)

    # ------------------------------------------------------------------
    def set_position(self, renderable: QGraphicsItem, x: float, y: float) -> None:
        renderable.setPos(x, y)

    # ------------------------------------------------------------------
    def set_size(self, renderable: QGraphicsPixmapItem, width: float, height: float) -> None:
        current = renderable.pixmap()
        if current.width() == int(width) and current.height() == int(height):
            return
        renderable.setPixmap(
            current.scaled(int(width), int(height), Qt.IgnoreAspectRatio, Qt.SmoothTransformation)
        )


__all__ = ["SceneDisplaySurface"]
