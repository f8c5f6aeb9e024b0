"""Entry point for the PySide6 slippy map preview window."""

from __future__ import annotations

import sys

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction
from PySide6.QtWidgets import QApplication, QFileDialog, QMainWindow, QMessageBox

from tileview.errors import MapSourceError, TileLoadingError
from tileview.settings.view import ViewSettings
from tileview.sources.file_source import FileTileSource
from tileview.sources.registry import MapSourceRegistry
from tileview.sources.synthetic import SyntheticTileSource

from .map_view import MapView
from .tile_loader import ThreadedTileSource


def create_threaded_registry(tile_directory: str | None = None) -> MapSourceRegistry:
    """Return a registry whose sources fetch on a worker thread."""

    registry = MapSourceRegistry()
    registry.register(
        "synthetic",
        lambda: ThreadedTileSource(SyntheticTileSource()),
        name="Synthetic grid",
    )
    if tile_directory:
        registry.register(
            "file",
            lambda: ThreadedTileSource(FileTileSource(tile_directory)),
            name=f"Local tiles ({tile_directory})",
        )
    return registry


class MainWindow(QMainWindow):
    """Primary window hosting a :class:`MapView`."""

    def __init__(
        self,
        *,
        settings: ViewSettings | None = None,
        center: tuple[float, float] = (0.0, 0.0),
    ) -> None:
        super().__init__()
        self.resize(1024, 768)
        self._settings = settings or ViewSettings()
        self._center = center

        self._registry = create_threaded_registry(self._settings.tile_directory)
        source_id = self._settings.source_id if self._settings.source_id in self._registry else "synthetic"
        self._map_view = MapView(self._registry, settings=self._settings, source_id=source_id)
        self._map_view.zoomChanged.connect(self._update_window_title)
        self.setCentralWidget(self._map_view)

        self._create_actions()
        self._create_menus()
        self._map_view.controller.center_on(*center)
        self._update_window_title()

    # ------------------------------------------------------------------
    def _create_actions(self) -> None:
        """Assemble actions that appear in the menu bar."""

        self._action_zoom_in = QAction("Zoom In", self)
        self._action_zoom_in.setShortcut(Qt.CTRL | Qt.Key_Plus)
        self._action_zoom_in.triggered.connect(self._map_view.controller.zoom_in)

        self._action_zoom_out = QAction("Zoom Out", self)
        self._action_zoom_out.setShortcut(Qt.CTRL | Qt.Key_Minus)
        self._action_zoom_out.triggered.connect(self._map_view.controller.zoom_out)

        self._action_reset_view = QAction("Go Home", self)
        self._action_reset_view.triggered.connect(self._go_home)

        self._action_open_tiles = QAction("Select Tile Directory…", self)
        self._action_open_tiles.triggered.connect(self._open_tile_directory)

    # ------------------------------------------------------------------
    def _create_menus(self) -> None:
        menu_bar = self.menuBar()

        view_menu = menu_bar.addMenu("View")
        view_menu.addAction(self._action_zoom_in)
        view_menu.addAction(self._action_zoom_out)
        view_menu.addSeparator()
        view_menu.addAction(self._action_reset_view)

        file_menu = menu_bar.addMenu("File")
        file_menu.addAction(self._action_open_tiles)

    # ------------------------------------------------------------------
    def _go_home(self) -> None:
        self._map_view.controller.go_to(*self._center)

    # ------------------------------------------------------------------
    def _open_tile_directory(self) -> None:
        """Register a tile directory as the ``file`` source and switch to it."""

        path = QFileDialog.getExistingDirectory(self, "Select tile directory")
        if not path:
            return

        self._registry.register(
            "file",
            lambda: ThreadedTileSource(FileTileSource(path)),
            name=f"Local tiles ({path})",
        )
        try:
            self._map_view.controller.set_map_source("file")
        except (MapSourceError, TileLoadingError) as exc:
            QMessageBox.critical(self, "Error", f"Unable to open the tile directory:\n{exc}")
            return
        self._update_window_title()

    # ------------------------------------------------------------------
    def _update_window_title(self, *_args) -> None:
        controller = self._map_view.controller
        self.setWindowTitle(f"tileview: {controller.map_source.name}, zoom {controller.zoom}")

    # ------------------------------------------------------------------
    def closeEvent(self, event) -> None:  # noqa: N802 - Qt override
        self._map_view.shutdown()
        super().closeEvent(event)


def main(
    settings: ViewSettings | None = None,
    center: tuple[float, float] = (0.0, 0.0),
) -> int:
    """Open the preview window and run the Qt event loop."""

    app = QApplication.instance() or QApplication(sys.argv)
    try:
        window = MainWindow(settings=settings, center=center)
    except (MapSourceError, TileLoadingError) as exc:
        QMessageBox.critical(None, "Error", f"Failed to initialize map:\n{exc}")
        return 1

    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
