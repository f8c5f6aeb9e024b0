"""Tests for tile reconciliation in the viewport controller."""

import math

import pytest

from tileview.core.controller import ViewportController
from tileview.core.surface import RecordingSurface
from tileview.core.tile import TileState
from tileview.settings.view import ViewSettings
from tileview.sources.registry import MapSourceRegistry

from conftest import FakeMapSource


def _expected_cells(controller: ViewportController) -> set[tuple[int, int]]:
    """Cells whose pixel square intersects the visible rectangle."""

    viewport = controller.viewport
    anchor = controller.anchor
    left = viewport.x + anchor.x
    top = viewport.y + anchor.y
    level = controller.zoom_level
    size = level.tile_size
    first_x, first_y = math.floor(left / size), math.floor(top / size)
    last_x = min(math.ceil((left + viewport.width) / size) - 1, level.columns - 1)
    last_y = min(math.ceil((top + viewport.height) / size) - 1, level.rows - 1)
    return {(x, y) for x in range(first_x, last_x + 1) for y in range(first_y, last_y + 1)}


def test_operations_before_first_centre_are_noops(make_controller, source) -> None:
    controller = make_controller()
    assert controller.zoom_level is None
    assert controller.reconcile().requested == []
    assert controller.set_zoom(4) is False
    controller.scroll_left()
    controller.reposition_tiles()
    assert source.requests == []
    assert controller.state is TileState.INIT


def test_centre_on_requests_covering_tiles(make_controller, source, surface) -> None:
    controller = make_controller(zoom=3)
    states = []
    controller.state_changed.connect(states.append)

    controller.center_on(0.0, 0.0)

    level = controller.zoom_level
    assert level is not None and level.level == 3
    assert {tile.key for tile in level} == {(x, y) for x in range(2, 7) for y in range(2, 6)}
    assert len(source.requests) == 20
    assert _expected_cells(controller) <= {tile.key for tile in level}
    assert all(tile.state is TileState.LOADING for tile in level)
    assert controller.state is TileState.LOADING
    assert states == [TileState.LOADING]
    assert len(surface.attached_tiles()) == 20


def test_nearest_tiles_are_requested_first(make_controller, source) -> None:
    controller = make_controller(zoom=3)
    controller.center_on(0.0, 0.0)
    first = source.requests[0]
    assert first[1:] in {(3, 3), (3, 4), (4, 3), (4, 4)}


def test_reconcile_is_idempotent(make_controller, source, surface) -> None:
    controller = make_controller(zoom=3)
    controller.center_on(0.0, 0.0)
    attached = surface.attach_count

    result = controller.reconcile()

    assert result.requested == []
    assert result.evicted == []
    assert len(source.requests) == 20
    assert surface.attach_count == attached


def test_completion_flips_state_once(make_controller, source) -> None:
    controller = make_controller(zoom=3)
    states = []
    controller.state_changed.connect(states.append)
    controller.center_on(0.0, 0.0)

    source.complete_all()

    assert controller.state is TileState.DONE
    assert states == [TileState.LOADING, TileState.DONE]
    assert all(tile.state is TileState.DONE for tile in controller.zoom_level)
    assert all(item.content is not None for item in controller.surface.attached_tiles())


def test_tiles_are_placed_at_their_grid_offset(make_controller, source) -> None:
    controller = make_controller(zoom=3)
    controller.center_on(0.0, 0.0)
    source.complete_all()
    for tile in controller.zoom_level:
        assert tile.renderable.position == (tile.x * 256, tile.y * 256)
        assert tile.renderable.size == (256, 256)


def test_scrolling_evicts_tiles_out_of_range(make_controller, source, surface) -> None:
    controller = make_controller(zoom=3)
    controller.center_on(0.0, 0.0)
    source.complete_all()
    old = {tile.key: tile.renderable for tile in controller.zoom_level}

    controller.scroll_by(1024, 0)

    keys = {tile.key for tile in controller.zoom_level}
    assert keys == {(x, y) for x in (6, 7) for y in range(2, 6)}
    for key, item in old.items():
        if key[0] < 6:
            assert item.attached is False
            assert item.parent is None
    assert _expected_cells(controller) <= keys


def test_stale_results_for_evicted_tiles_are_discarded(make_controller, source) -> None:
    controller = make_controller(zoom=3)
    controller.center_on(0.0, 0.0)
    controller.scroll_by(1024, 0)

    source.complete(3, 2, 2)
    source.fail(3, 3, 3)

    assert controller.zoom_level.get_tile(2, 2) is None
    assert controller.zoom_level.get_tile(3, 3) is None
    assert controller.state is TileState.LOADING


def test_failed_tile_shows_error_and_notifies(make_controller, source) -> None:
    controller = make_controller(zoom=3)
    failures = []
    handled = []
    controller.tile_failed.connect(lambda tile, error: failures.append((tile.key, error)))
    controller.error_handler.error_occurred.connect(lambda *args: handled.append(args))
    controller.center_on(0.0, 0.0)

    source.fail(3, 4, 4)
    source.complete_all()

    tile = controller.zoom_level.get_tile(4, 4)
    assert tile.state is TileState.ERROR
    assert tile.renderable.error is True
    assert [key for key, _ in failures] == [(4, 4)]
    assert len(handled) == 1
    assert controller.state is TileState.DONE


def test_fetch_raising_os_error_fails_the_tile_not_the_pass(
    make_controller, source, monkeypatch
) -> None:
    def _unplugged(x, y, zoom, on_complete) -> None:
        raise OSError("tile volume unplugged")

    monkeypatch.setattr(source, "fetch_tile", _unplugged)
    controller = make_controller(zoom=3)
    failures = []
    controller.tile_failed.connect(lambda tile, error: failures.append(error))

    controller.center_on(0.0, 0.0)

    level = controller.zoom_level
    assert _expected_cells(controller) <= {tile.key for tile in level}
    assert all(tile.state is TileState.ERROR for tile in level)
    assert all(tile.renderable.error for tile in level)
    assert len(failures) == len(level)
    assert all(isinstance(error, OSError) for error in failures)
    assert controller.state is TileState.DONE


def test_synchronous_source_reaches_done_in_one_pass() -> None:
    source = FakeMapSource("sync", synchronous=True)
    registry = MapSourceRegistry()
    registry.register_instance(source)
    controller = ViewportController(
        registry,
        RecordingSurface(),
        settings=ViewSettings(initial_zoom=2, source_id="sync"),
    )
    states = []
    controller.state_changed.connect(states.append)
    controller.set_visible_rect(0, 0, 640, 480)

    controller.center_on(10.0, 10.0)

    assert states == [TileState.DONE]
    assert all(tile.state is TileState.DONE for tile in controller.zoom_level)


def test_rect_changes_during_a_pass_are_applied_afterwards(make_controller, source) -> None:
    controller = make_controller(zoom=3)
    moves = []

    def _scroll_on_first_load(state) -> None:
        if state is TileState.LOADING and not moves:
            viewport = controller.viewport
            moves.append(viewport.x)
            controller.set_visible_rect(viewport.x + 256, viewport.y, viewport.width, viewport.height)

    controller.state_changed.connect(_scroll_on_first_load)
    controller.center_on(0.0, 0.0)

    assert controller.viewport.x == pytest.approx(moves[0] + 256)
    assert _expected_cells(controller) <= {tile.key for tile in controller.zoom_level}
    assert controller.longitude > 0.0


def test_shutdown_releases_tiles(make_controller, source, surface) -> None:
    controller = make_controller(zoom=3)
    controller.center_on(0.0, 0.0)
    controller.shutdown()
    assert controller.zoom_level is None
    assert surface.root == []
    assert surface.attached_tiles() == []
