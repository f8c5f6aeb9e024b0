"""Scrolling far at high zoom must re-base positions without visible jumps."""

import pytest

from tileview.config import MAX_REPRESENTABLE_PIXEL
from tileview.core.controller import ViewportController
from tileview.settings.view import ViewSettings
from tileview.sources.registry import MapSourceRegistry

from conftest import FakeMapSource


def _assert_positions_consistent(controller) -> None:
    anchor = controller.anchor
    for tile in controller.zoom_level:
        x, y = tile.renderable.position
        assert x == tile.x * tile.size - anchor.x
        assert y == tile.y * tile.size - anchor.y
        assert abs(x) < MAX_REPRESENTABLE_PIXEL
        assert abs(y) < MAX_REPRESENTABLE_PIXEL


def test_anchor_is_recentred_at_high_zoom(make_controller) -> None:
    controller = make_controller(zoom=10)
    controller.center_on(0.0, 0.0)
    assert (controller.anchor.x, controller.anchor.y) == (114689.0, 114689.0)
    assert controller.viewport.x == pytest.approx(131072 - 114689 - 400)
    _assert_positions_consistent(controller)


def test_long_scroll_keeps_geography_on_screen(make_controller, source) -> None:
    controller = make_controller(zoom=10)
    controller.center_on(0.0, 0.0)
    source.complete_all()
    initial_anchor = controller.anchor
    probe = controller.coords_at(600.0, 300.0)
    screen_x, screen_y = controller.screen_position(*probe)
    assert (screen_x, screen_y) == pytest.approx((600.0, 300.0))

    for _ in range(32):
        controller.scroll_by(500, 0)
        source.complete_all()
        next_x, next_y = controller.screen_position(*probe)
        assert next_x == pytest.approx(screen_x - 500, abs=1e-6)
        assert next_y == pytest.approx(screen_y, abs=1e-6)
        screen_x, screen_y = next_x, next_y
        _assert_positions_consistent(controller)

    assert controller.anchor.x != initial_anchor.x
    assert controller.anchor.y == initial_anchor.y
    assert controller.viewport.x + controller.viewport.width < MAX_REPRESENTABLE_PIXEL


def test_anchor_change_does_not_move_the_centre(make_controller, source) -> None:
    controller = make_controller(zoom=10)
    controller.center_on(0.0, 0.0)
    controller.scroll_by(16000, 0)

    assert controller.anchor.x == 147072.0 - 16383
    raw_center_x = controller.viewport.x + controller.anchor.x + 400
    assert raw_center_x == pytest.approx(131072 + 16000)
    lat, lon = controller.center
    assert lat == pytest.approx(0.0, abs=1e-9)
    assert lon == pytest.approx(16000 / (256 * 1024) * 360.0, abs=1e-9)


@pytest.mark.parametrize("dx, dy", [(-500, 0), (0, -500)])
def test_scrolling_left_or_up_rebases_before_positions_overflow(
    make_controller, source, dx: int, dy: int
) -> None:
    controller = make_controller(zoom=10)
    controller.center_on(0.0, 0.0)
    source.complete_all()
    initial_anchor = controller.anchor
    point = controller.coords_at(400.0, 300.0)
    screen_x, screen_y = controller.screen_position(*point)

    for _ in range(150):
        controller.scroll_by(dx, dy)
        source.complete_all()
        next_x, next_y = controller.screen_position(*point)
        assert next_x == pytest.approx(screen_x - dx, abs=1e-6)
        assert next_y == pytest.approx(screen_y - dy, abs=1e-6)
        screen_x, screen_y = next_x, next_y
        _assert_positions_consistent(controller)
        assert controller.viewport.x > -MAX_REPRESENTABLE_PIXEL
        assert controller.viewport.y > -MAX_REPRESENTABLE_PIXEL

    if dx:
        assert controller.anchor.x < initial_anchor.x
        assert controller.anchor.y == initial_anchor.y
    else:
        assert controller.anchor.y < initial_anchor.y
        assert controller.anchor.x == initial_anchor.x


def test_large_tiles_are_anchored_before_the_threshold_zoom(surface) -> None:
    source = FakeMapSource("large", tile_size=512)
    registry = MapSourceRegistry()
    registry.register_instance(source)
    controller = ViewportController(
        registry,
        surface,
        settings=ViewSettings(initial_zoom=7, source_id="large"),
    )
    controller.set_visible_rect(0, 0, 800, 600)

    controller.center_on(0.0, 170.0)
    source.complete_all()

    assert (controller.anchor.x, controller.anchor.y) == (47332.0, 16385.0)
    assert controller.viewport.x + controller.viewport.width < MAX_REPRESENTABLE_PIXEL
    _assert_positions_consistent(controller)
    lat, lon = controller.center
    assert lat == pytest.approx(0.0, abs=1e-9)
    assert lon == pytest.approx(170.0, abs=1e-9)
