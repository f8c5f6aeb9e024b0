"""Tests for deferred tasks, the manual frame clock and easing curves."""

import pytest

from tileview.core.clock import ManualFrameClock
from tileview.core.easing import EASING_CURVES, ease_in_out_circ, easing_by_name
from tileview.core.tasks import DeferredTaskQueue


def test_deferred_tasks_collapse_by_key() -> None:
    queue = DeferredTaskQueue()
    calls = []
    queue.defer("state", lambda: calls.append("first"))
    queue.defer("position", lambda: calls.append("position"))
    queue.defer("state", lambda: calls.append("second"))

    assert len(queue) == 2
    assert queue.drain() == 2
    assert calls == ["position", "second"]
    assert len(queue) == 0


def test_tasks_queued_while_draining_run_in_the_same_drain() -> None:
    queue = DeferredTaskQueue()
    calls = []

    def _first() -> None:
        calls.append("first")
        queue.defer("follow-up", lambda: calls.append("follow-up"))
        assert queue.drain() == 0

    queue.defer("first", _first)
    assert queue.drain() == 2
    assert calls == ["first", "follow-up"]


def test_manual_clock_delivers_one_frame_per_advance() -> None:
    clock = ManualFrameClock(start_time=10.0)
    frames = []
    clock.advance(1.0)
    clock.start(frames.append)
    clock.advance(0.5)
    clock.advance(0.25)
    clock.stop()
    clock.advance(1.0)

    assert frames == [11.5, 11.75]
    assert clock.now() == 12.75
    with pytest.raises(ValueError):
        clock.advance(-1.0)


def test_run_until_idle_stops_when_nothing_listens() -> None:
    clock = ManualFrameClock()
    seen = []

    def _frame(now: float) -> None:
        seen.append(now)
        if len(seen) == 3:
            clock.stop()

    clock.start(_frame)
    assert clock.run_until_idle(step=0.1) == 3
    assert not clock.running


@pytest.mark.parametrize("name", sorted(EASING_CURVES))
def test_easing_curves_span_the_unit_interval(name: str) -> None:
    curve = easing_by_name(name)
    assert curve(0.0) == pytest.approx(0.0)
    assert curve(1.0) == pytest.approx(1.0)
    assert curve(0.5) == pytest.approx(0.5)


def test_circular_easing_is_slow_at_both_ends() -> None:
    assert ease_in_out_circ(0.1) < 0.1
    assert ease_in_out_circ(0.9) > 0.9


def test_unknown_easing_name() -> None:
    with pytest.raises(ValueError):
        easing_by_name("bounce")
