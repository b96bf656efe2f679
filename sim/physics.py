#!/usr/bin/env python3
"""
sim/physics.py
==============
Low-level physics helpers used by :mod:`sim.car_system` and
:mod:`sim.traffic_policy`.

Keeping these in a separate module avoids circular imports and makes unit
testing straightforward.
"""

from __future__ import annotations

import math
from typing import Sequence


def kmh_to_mps(speed_kmh: float) -> float:
    """Convert km/h to m/s, clamping negatives to zero."""
    return max(0.0, float(speed_kmh)) / 3.6


def heading_of(direction: Sequence[float]) -> float:
    """Heading angle (rad, CCW from +x) of a direction vector."""
    return math.atan2(direction[1], direction[0])


def wrap_angle(angle: float) -> float:
    """Wrap *angle* into ``(-pi, pi]``."""
    wrapped = math.fmod(angle + math.pi, 2.0 * math.pi)
    if wrapped <= 0.0:
        wrapped += 2.0 * math.pi
    return wrapped - math.pi


def lateral_offset(
    position: Sequence[float],
    center: Sequence[float],
    tangent: Sequence[float],
) -> float:
    """Signed distance of *position* from a centreline point.

    Positive → left of the travel direction, negative → right.

    Parameters
    ----------
    position : (x, y)
        Point being measured.
    center : (x, y)
        Centreline point.
    tangent : (dx, dy)
        Unit travel direction at *center*.
    """
    dx = position[0] - center[0]
    dy = position[1] - center[1]
    return -tangent[1] * dx + tangent[0] * dy


def normalized_deviation(offset: float, half_width: float) -> float:
    """Map a signed lateral offset onto ``[0, 1]``.

    ``0`` is the left border, ``0.5`` the centreline and ``1`` the right
    border; offsets beyond a border saturate.
    """
    value = 0.5 - offset / (2.0 * half_width)
    return min(1.0, max(0.0, value))
