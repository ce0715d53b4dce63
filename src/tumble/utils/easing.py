"""Easing curves mapping linear progress 0..1 to eased progress."""
from __future__ import annotations

import math
from typing import Callable, Dict

Easing = Callable[[float], float]


def linear(t: float) -> float:
    return t


def cubic_out(t: float) -> float:
    return 1.0 - (1.0 - t) ** 3


def cubic_in(t: float) -> float:
    return t ** 3


def sine_in_out(t: float) -> float:
    return -(math.cos(math.pi * t) - 1.0) / 2.0


def back_out(t: float) -> float:
    # Slight overshoot, used for pop-in and reel settle.
    c1 = 1.70158
    c3 = c1 + 1.0
    return 1.0 + c3 * (t - 1.0) ** 3 + c1 * (t - 1.0) ** 2


EASINGS: Dict[str, Easing] = {
    "linear": linear,
    "cubic_out": cubic_out,
    "cubic_in": cubic_in,
    "sine_in_out": sine_in_out,
    "back_out": back_out,
}


def resolve_easing(easing: "str | Easing | None") -> Easing:
    if easing is None:
        return linear
    if callable(easing):
        return easing
    return EASINGS.get(easing, linear)
