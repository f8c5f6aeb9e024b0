"""Easing curves for time based animations."""

from __future__ import annotations

import math
from typing import Callable

Easing = Callable[[float], float]


def linear(t: float) -> float:
    return t


def ease_in_out_circ(t: float) -> float:
    """Circular ease-in-ease-out, slow at both ends of the pan."""

    t = min(max(t, 0.0), 1.0)
    if t < 0.5:
        return (1.0 - math.sqrt(1.0 - (2.0 * t) ** 2)) / 2.0
    return (math.sqrt(1.0 - (-2.0 * t + 2.0) ** 2) + 1.0) / 2.0


def ease_in_out_cubic(t: float) -> float:
    """Cubic ease-in-ease-out."""

    t = min(max(t, 0.0), 1.0)
    if t < 0.5:
        return 4.0 * t * t * t
    return 1.0 - (-2.0 * t + 2.0) ** 3 / 2.0


EASING_CURVES: dict[str, Easing] = {
    "linear": linear,
    "ease-in-out-circ": ease_in_out_circ,
    "ease-in-out-cubic": ease_in_out_cubic,
}


def easing_by_name(name: str) -> Easing:
    """Return the curve registered under *name*."""

    try:
        return EASING_CURVES[name]
    except KeyError as exc:
        raise ValueError(f"Unknown easing curve '{name}'") from exc


__all__ = [
    "EASING_CURVES",
    "Easing",
    "ease_in_out_circ",
    "ease_in_out_cubic",
    "easing_by_name",
    "linear",
]
