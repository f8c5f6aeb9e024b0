"""Time driven "go to" animation between two geographic coordinates."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from functools import partial
from typing import Callable

from tileview.config import GO_TO_BASE_DURATION_MS
from tileview.utils.signal import Signal

from .clock import FrameClock
from .easing import Easing, ease_in_out_circ

_LOGGER = logging.getLogger(__name__)

Recenter = Callable[[float, float], None]


class AnimationState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    STOPPED = "stopped"


@dataclass
class GoToContext:
    """Parameters of the animation currently in flight."""

    from_latitude: float
    from_longitude: float
    to_latitude: float
    to_longitude: float
    duration: float
    started_at: float
    elapsed_fraction: float = 0.0

    def interpolate(self, alpha: float) -> tuple[float, float]:
        return (
            self.from_latitude + alpha * (self.to_latitude - self.from_latitude),
            self.from_longitude + alpha * (self.to_longitude - self.from_longitude),
        )


def default_go_to_duration(zoom: int) -> int:
    """Return the default duration in milliseconds for a go-to at *zoom*.

    Higher zoom levels get longer animations because every pixel covers a
    smaller geographic distance.
    """

    return int(GO_TO_BASE_DURATION_MS * zoom / 2)


class GoToAnimation:
    """Interpolate the view centre frame by frame.

    The animation never owns the view: each frame calls ``recenter`` with
    the interpolated coordinate.  Progress depends only on the absolute time
    elapsed since :meth:`start`, so dropped or irregular frames do not change
    where the animation ends up.
    """

    def __init__(
        self,
        recenter: Recenter,
        clock: FrameClock | None,
        *,
        easing: Easing = ease_in_out_circ,
    ) -> None:
        self._recenter = recenter
        self._clock = clock
        self._easing = easing
        self._state = AnimationState.IDLE
        self._context: GoToContext | None = None

        self.completed = Signal()
        """Emitted when an animation reaches its destination."""

        self.stopped = Signal()
        """Emitted when an animation is cancelled before arriving."""

        self.ended = Signal()
        """Emitted after either :attr:`completed` or :attr:`stopped`."""

    # ------------------------------------------------------------------
    @property
    def state(self) -> AnimationState:
        return self._state

    @property
    def context(self) -> GoToContext | None:
        return self._context

    @property
    def is_running(self) -> bool:
        return self._context is not None

    @property
    def clock(self) -> FrameClock | None:
        return self._clock

    # ------------------------------------------------------------------
    def set_easing(self, easing: Easing) -> None:
        self._easing = easing

    # ------------------------------------------------------------------
    def start(
        self,
        from_latitude: float,
        from_longitude: float,
        to_latitude: float,
        to_longitude: float,
        duration_ms: int,
    ) -> None:
        """Begin animating from the given origin to the destination."""

        if duration_ms < 0:
            raise ValueError(f"Animation duration must not be negative, got {duration_ms}")

        # Any previous animation is discarded before the new one starts.
        self.stop()

        if duration_ms == 0 or self._clock is None:
            self._recenter(to_latitude, to_longitude)
            return

        context = GoToContext(
            from_latitude=from_latitude,
            from_longitude=from_longitude,
            to_latitude=to_latitude,
            to_longitude=to_longitude,
            duration=duration_ms / 1000.0,
            started_at=self._clock.now(),
        )
        self._context = context
        self._state = AnimationState.RUNNING
        _LOGGER.debug(
            "Go to (%f, %f) from (%f, %f) over %d ms",
            to_latitude,
            to_longitude,
            from_latitude,
            from_longitude,
            duration_ms,
        )
        self._clock.start(partial(self._on_frame, context))

    # ------------------------------------------------------------------
    def stop(self) -> bool:
        """Cancel the running animation, leaving the view where it is."""

        if self._context is None:
            return False

        self._state = AnimationState.STOPPED
        self._context = None
        if self._clock is not None:
            self._clock.stop()
        self._state = AnimationState.IDLE
        self.stopped.emit()
        self.ended.emit()
        return True

    # ------------------------------------------------------------------
    def _on_frame(self, context: GoToContext, now: float) -> None:
        """Advance *context* to timestamp *now*."""

        if context is not self._context:
            # A frame queued before cancellation; the context is gone.
            return

        elapsed = max(0.0, now - context.started_at)
        if elapsed >= context.duration:
            self._complete(context)
            return

        context.elapsed_fraction = elapsed / context.duration
        latitude, longitude = context.interpolate(self._easing(context.elapsed_fraction))
        self._recenter(latitude, longitude)

    # ------------------------------------------------------------------
    def _complete(self, context: GoToContext) -> None:
        self._state = AnimationState.COMPLETED
        self._context = None
        if self._clock is not None:
            self._clock.stop()
        context.elapsed_fraction = 1.0

        # Land exactly on the target whatever the last frame computed.
        self._recenter(context.to_latitude, context.to_longitude)

        if self._context is None:
            self._state = AnimationState.IDLE
        self.completed.emit()
        self.ended.emit()


__all__ = [
    "AnimationState",
    "GoToAnimation",
    "GoToContext",
    "default_go_to_duration",
]
