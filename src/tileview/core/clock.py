"""Frame clock contract and a deterministic implementation."""

from __future__ import annotations

from typing import Callable, Protocol

FrameCallback = Callable[[float], None]


class FrameClock(Protocol):
    """Periodic tick source driving animations.

    ``now`` returns a monotonic timestamp in seconds.  While started, the
    clock calls the callback with the timestamp of each frame.  Frames may be
    skipped or arrive irregularly.
    """

    def now(self) -> float:  # pragma: no cover - interface definition only
        ...

    def start(self, callback: FrameCallback) -> None:  # pragma: no cover - interface definition only
        ...

    def stop(self) -> None:  # pragma: no cover - interface definition only
        ...


class ManualFrameClock:
    """Clock advanced explicitly by the caller.

    Used by headless hosts and tests: every :meth:`advance` moves time forward
    and delivers exactly one frame when a callback is registered.
    """

    def __init__(self, start_time: float = 0.0) -> None:
        self._now = float(start_time)
        self._callback: FrameCallback | None = None

    # ------------------------------------------------------------------
    def now(self) -> float:
        return self._now

    # ------------------------------------------------------------------
    def start(self, callback: FrameCallback) -> None:
        self._callback = callback

    # ------------------------------------------------------------------
    def stop(self) -> None:
        self._callback = None

    # ------------------------------------------------------------------
    @property
    def running(self) -> bool:
        return self._callback is not None

    # ------------------------------------------------------------------
    def advance(self, seconds: float) -> None:
        """Move time forward by *seconds* and deliver a frame."""

        if seconds < 0:
            raise ValueError("Clock cannot move backwards")
        self._now += seconds
        callback = self._callback
        if callback is not None:
            callback(self._now)

    # ------------------------------------------------------------------
    def run_until_idle(self, step: float = 1.0 / 60.0, limit: int = 100_000) -> int:
        """Advance in *step* increments until nothing listens any more."""

        frames = 0
        while self._callback is not None and frames < limit:
            self.advance(step)
            frames += 1
        return frames


__all__ = ["FrameCallback", "FrameClock", "ManualFrameClock"]
