"""Tests for scrolling, resizing, picking and map source switching."""

import pytest

from tileview.core.tile import TileState
from tileview.errors import MapSourceNotFoundError

from conftest import FakeMapSource


def _raw_centre(controller) -> tuple[float, float]:
    return controller.projection.to_pixels(controller.zoom, *controller.center)


def test_push_scrolling_moves_by_a_quarter_view(make_controller) -> None:
    controller = make_controller(zoom=5)
    controller.center_on(0.0, 0.0)
    x, y = _raw_centre(controller)

    controller.scroll_left()
    assert _raw_centre(controller) == pytest.approx((x - 200.0, y))
    controller.scroll_right()
    controller.scroll_up()
    assert _raw_centre(controller) == pytest.approx((x, y - 150.0))
    controller.scroll_down()
    assert _raw_centre(controller) == pytest.approx((x, y))


def test_kinetic_scrolling_animates(make_controller, clock) -> None:
    controller = make_controller(zoom=5, scroll_mode="kinetic")
    controller.center_on(0.0, 0.0)
    x, y = _raw_centre(controller)

    controller.scroll_right()
    assert controller.is_animating
    assert controller.animation.context.duration == pytest.approx(0.3)
    clock.run_until_idle()

    assert _raw_centre(controller) == pytest.approx((x + 200.0, y))


def test_scrolling_stops_at_the_grid_edge(make_controller) -> None:
    controller = make_controller(zoom=1)
    controller.center_on(0.0, 0.0)
    controller.scroll_by(10_000, 10_000)
    lat, lon = controller.center
    assert lon == pytest.approx(180.0)
    assert lat == pytest.approx(-85.05112878)


def test_resize_keeps_the_centre(make_controller) -> None:
    controller = make_controller(zoom=4)
    controller.center_on(12.0, 34.0)

    controller.set_visible_rect(0, 0, 1024, 768)

    assert controller.center == (12.0, 34.0)
    assert controller.viewport.width == 1024
    assert controller.coords_at(512, 384) == pytest.approx((12.0, 34.0))


def test_resize_without_keep_centre_keeps_the_origin(make_controller) -> None:
    controller = make_controller(zoom=4, keep_center_on_resize=False)
    controller.center_on(0.0, 0.0)
    origin = controller.viewport.x, controller.viewport.y

    controller.set_visible_rect(origin[0], origin[1], 1200, 900)

    assert (controller.viewport.x, controller.viewport.y) == origin
    lat, lon = controller.center
    assert lon > 0.0
    assert lat < 0.0


def test_coords_and_screen_position_are_inverse(make_controller) -> None:
    controller = make_controller(zoom=11)
    controller.center_on(51.5, -0.12)
    lat, lon = controller.coords_at(123.0, 456.0)
    assert controller.screen_position(lat, lon) == pytest.approx((123.0, 456.0), abs=1e-6)
    assert controller.coords_at(400.0, 300.0) == pytest.approx((51.5, -0.12), abs=1e-9)


def test_switching_source_rebuilds_the_grid(make_controller, registry, surface) -> None:
    other = FakeMapSource("other", max_zoom=2)
    registry.register_instance(other)
    controller = make_controller(zoom=10)
    controller.center_on(40.0, 40.0)
    zooms = []
    controller.zoom_changed.connect(zooms.append)

    controller.set_map_source("other")

    assert controller.map_source is other
    assert controller.zoom == 2
    assert zooms == [2]
    assert controller.max_zoom == 2
    assert (controller.anchor.x, controller.anchor.y) == (0.0, 0.0)
    assert controller.center == (40.0, 40.0)
    assert other.requests
    assert [group.name for group in surface.root] == ["level-2"]
    assert controller.state is TileState.LOADING


def test_switching_to_unknown_source_fails_cleanly(make_controller, source) -> None:
    controller = make_controller(zoom=3)
    controller.center_on(0.0, 0.0)
    with pytest.raises(MapSourceNotFoundError):
        controller.set_map_source("missing")
    assert controller.map_source is source


def test_scroll_mode_is_validated(make_controller) -> None:
    controller = make_controller()
    with pytest.raises(ValueError):
        controller.scroll_mode = "drift"
