"""
fuzzy/road_deviation.py
=======================
Fuzzy description of a car's lateral position inside its lane.

The single input is the *normalised lateral deviation* on ``[0, 1]``:
``0.0`` is the left border, ``0.5`` the lane centre, ``1.0`` the right
border.  Seven overlapping piecewise-linear sets partition it::

    far-left      1 below 0.10, down to 0 at 0.25
    middle-left   triangle 0.10 / 0.25 / 0.40
    left          1 below 0.35, down to 0 at 0.50
    middle        triangle 0.35 / 0.50 / 0.65
    right         0 below 0.50, up to 1 at 0.65
    middle-right  triangle 0.60 / 0.75 / 0.90
    far-right     0 below 0.75, up to 1 at 0.90
"""

from __future__ import annotations

from typing import Callable, Dict, Tuple

from fuzzy.engine import Fuzzy, FuzzyInput, FuzzySet

SET_NAMES: Tuple[str, ...] = (
    "far_left",
    "middle_left",
    "left",
    "middle",
    "right",
    "middle_right",
    "far_right",
)


# ── Piecewise-linear shapes ───────────────────────────────────────────────────

def falling(x1: float, x2: float) -> Callable[[float], float]:
    """1 below *x1*, linear down to 0 at *x2*, 0 beyond."""
    def fn(x: float) -> float:
        if x < x1:
            return 1.0
        if x < x2:
            return (x2 - x) / (x2 - x1)
        return 0.0
    return fn


def rising(x1: float, x2: float) -> Callable[[float], float]:
    """0 below *x1*, linear up to 1 at *x2*, 1 beyond."""
    def fn(x: float) -> float:
        if x < x1:
            return 0.0
        if x < x2:
            return (x - x1) / (x2 - x1)
        return 1.0
    return fn


def triangle(x1: float, x2: float, x3: float) -> Callable[[float], float]:
    """0 outside ``(x1, x3)``, peak of 1 at *x2*."""
    def fn(x: float) -> float:
        if x < x1:
            return 0.0
        if x < x2:
            return (x - x1) / (x2 - x1)
        if x < x3:
            return (x3 - x) / (x3 - x2)
        return 0.0
    return fn


far_left_fn = falling(0.10, 0.25)
middle_left_fn = triangle(0.10, 0.25, 0.40)
left_fn = falling(0.35, 0.50)
middle_fn = triangle(0.35, 0.50, 0.65)
right_fn = rising(0.50, 0.65)
middle_right_fn = triangle(0.60, 0.75, 0.90)
far_right_fn = rising(0.75, 0.90)


class RoadDeviation:
    """Handles for the deviation input and its seven sets.

    Parameters
    ----------
    fuzzy : Fuzzy
        Engine the input and sets are registered on.  The handles are
        only valid against this engine.
    """

    def __init__(self, fuzzy: Fuzzy) -> None:
        self.fuzzy = fuzzy
        self.input: FuzzyInput = fuzzy.add_input(0.0, 1.0)

        self.far_left: FuzzySet = fuzzy.add_input_set(self.input, far_left_fn, "far_left")
        self.middle_left: FuzzySet = fuzzy.add_input_set(self.input, middle_left_fn, "middle_left")
        self.left: FuzzySet = fuzzy.add_input_set(self.input, left_fn, "left")
        self.middle: FuzzySet = fuzzy.add_input_set(self.input, middle_fn, "middle")
        self.right: FuzzySet = fuzzy.add_input_set(self.input, right_fn, "right")
        self.middle_right: FuzzySet = fuzzy.add_input_set(self.input, middle_right_fn, "middle_right")
        self.far_right: FuzzySet = fuzzy.add_input_set(self.input, far_right_fn, "far_right")

    def sets(self) -> Dict[str, FuzzySet]:
        """Name → handle, in left-to-right order."""
        return {name: getattr(self, name) for name in SET_NAMES}

    def evaluate(self, deviation: float) -> Dict[str, float]:
        """Membership of *deviation* in every set, keyed by set name."""
        return {
            name: self.fuzzy.membership(handle, deviation)
            for name, handle in self.sets().items()
        }
