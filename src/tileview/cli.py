"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

import typer
from rich import print
from rich.console import Console
from rich.table import Table

from tileview.core.clock import ManualFrameClock
from tileview.core.controller import ViewportController
from tileview.core.surface import RecordingSurface
from tileview.errors import (
    MapSourceNotFoundError,
    ProjectionError,
    SettingsError,
    TileViewError,
    ZoomUnsupported,
)
from tileview.settings import SettingsManager, ViewSettings
from tileview.sources.registry import create_default_registry
from tileview.utils.console_logger import ensure_console_logger

app = typer.Typer(help="Slippy-map viewport planner and preview")
console = Console()


class _State:
    settings: ViewSettings = ViewSettings()


_state = _State()


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (ProjectionError, ZoomUnsupported, MapSourceNotFoundError, SettingsError) as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc
        except TileViewError as exc:
            typer.echo(f"Unexpected error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log viewport diagnostics."),
    settings_path: Optional[Path] = typer.Option(
        None, "--settings", help="Settings JSON file to read view options from."
    ),
) -> None:
    """Configure logging and settings shared by every command."""

    if verbose:
        ensure_console_logger(
            logging.getLogger("tileview"),
            "tileview.cli",
            level=logging.DEBUG,
        )
    if settings_path is not None:
        manager = SettingsManager(settings_path)
        try:
            manager.load()
        except SettingsError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc
        _state.settings = manager.view_settings()
    else:
        _state.settings = ViewSettings()


def _build_controller(
    zoom: int,
    width: int,
    height: int,
    *,
    source: Optional[str] = None,
    clock: ManualFrameClock | None = None,
) -> tuple[ViewportController, RecordingSurface]:
    settings = replace(_state.settings, initial_zoom=zoom)
    registry = create_default_registry(settings.tile_directory)
    surface = RecordingSurface()
    controller = ViewportController(
        registry,
        surface,
        source_id=source,
        clock=clock,
        settings=settings,
    )
    controller.set_visible_rect(0, 0, width, height)
    return controller, surface


def _print_summary(controller: ViewportController) -> None:
    latitude, longitude = controller.center
    anchor = controller.anchor
    print(
        f"[bold]Centre[/bold] {latitude:.6f}, {longitude:.6f}  "
        f"[bold]zoom[/bold] {controller.zoom}  "
        f"[bold]anchor[/bold] ({anchor.x:.0f}, {anchor.y:.0f})  "
        f"[bold]state[/bold] {controller.state.value}"
    )


@app.command()
@_handle_errors
def plan(
    latitude: float = typer.Option(0.0, "--lat", help="Centre latitude."),
    longitude: float = typer.Option(0.0, "--lon", help="Centre longitude."),
    zoom: int = typer.Option(3, "--zoom", "-z"),
    width: int = typer.Option(800, "--width"),
    height: int = typer.Option(600, "--height"),
    source: Optional[str] = typer.Option(None, "--source"),
) -> None:
    """Print the tiles covering a view and where they are placed."""

    controller, _ = _build_controller(zoom, width, height, source=source)
    controller.center_on(latitude, longitude)
    _print_summary(controller)

    level = controller.zoom_level
    table = Table(title=f"{len(level)} tiles at zoom {level.level}")
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    table.add_column("state")
    table.add_column("position", justify="right")
    anchor = controller.anchor
    for tile in sorted(level.tiles(), key=lambda item: (item.y, item.x)):
        position = (tile.x * tile.size - anchor.x, tile.y * tile.size - anchor.y)
        table.add_row(
            str(tile.x),
            str(tile.y),
            tile.state.value,
            f"{position[0]:.0f}, {position[1]:.0f}",
        )
    console.print(table)


@app.command()
@_handle_errors
def fit(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    zoom: int = typer.Option(10, "--zoom", "-z", help="Zoom to start searching from."),
    width: int = typer.Option(800, "--width"),
    height: int = typer.Option(600, "--height"),
) -> None:
    """Find the zoom and centre that fit a bounding box into the view."""

    controller, _ = _build_controller(zoom, width, height)
    controller.center_on(0.0, 0.0)
    controller.ensure_visible(lat1, lon1, lat2, lon2)
    _print_summary(controller)


@app.command()
@_handle_errors
def goto(
    to_latitude: float = typer.Argument(..., help="Destination latitude."),
    to_longitude: float = typer.Argument(..., help="Destination longitude."),
    from_latitude: float = typer.Option(0.0, "--from-lat"),
    from_longitude: float = typer.Option(0.0, "--from-lon"),
    zoom: int = typer.Option(5, "--zoom", "-z"),
    duration: Optional[int] = typer.Option(None, "--duration", help="Duration in milliseconds."),
    fps: float = typer.Option(30.0, "--fps", min=1.0, help="Simulated frame rate."),
) -> None:
    """Simulate a go-to animation and print every frame."""

    clock = ManualFrameClock()
    controller, _ = _build_controller(zoom, 800, 600, clock=clock)
    controller.center_on(from_latitude, from_longitude)

    table = Table(title="Go to")
    table.add_column("t (ms)", justify="right")
    table.add_column("latitude", justify="right")
    table.add_column("longitude", justify="right")

    def _record(latitude: float, longitude: float) -> None:
        table.add_row(f"{clock.now() * 1000:.0f}", f"{latitude:.6f}", f"{longitude:.6f}")

    controller.center_changed.connect(_record)
    controller.go_to(to_latitude, to_longitude, duration)
    frames = clock.run_until_idle(step=1.0 / fps)
    console.print(table)
    print(f"[green]Arrived after {frames} frames")


@app.command()
def sources() -> None:
    """List the registered map sources."""

    registry = create_default_registry(_state.settings.tile_directory)
    table = Table(title="Map sources")
    table.add_column("id")
    table.add_column("name")
    table.add_column("default")
    for entry in registry.describe():
        table.add_row(entry.id, entry.name, "yes" if entry.id == _state.settings.source_id else "")
    console.print(table)


@app.command()
def view(
    latitude: float = typer.Option(0.0, "--lat"),
    longitude: float = typer.Option(0.0, "--lon"),
) -> None:
    """Open the interactive Qt preview window."""

    from tileview.qt.main import main as run_viewer

    raise typer.Exit(run_viewer(settings=_state.settings, center=(latitude, longitude)))


if __name__ == "__main__":  # pragma: no cover
    app()
