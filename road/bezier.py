"""
road/bezier.py
==============
Cubic Bezier segments between two anchored control points.

A segment from ``(Pa, Ta)`` to ``(Pb, Tb)`` uses the handles
``Pa + Ta * L / 3`` and ``Pb - Tb * L / 3`` where ``Ta``/``Tb`` are unit
tangents and ``L = |Pb - Pa|``.  Lane borders are built from control
points shifted sideways along each anchor's left normal, so two segments
sharing an anchor always share their end point, whatever the offset.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

Vec2 = Tuple[float, float]


def unit(v: Sequence[float]) -> Vec2:
    """Normalise a 2-D vector; raises ``ValueError`` for a zero vector."""
    length = math.hypot(v[0], v[1])
    if length < 1e-12:
        raise ValueError(f"cannot normalise zero-length vector {tuple(v)!r}")
    return (v[0] / length, v[1] / length)


def left_normal(direction: Sequence[float]) -> Vec2:
    """Unit normal pointing to the left of *direction* (CCW rotation)."""
    ux, uy = unit(direction)
    return (-uy, ux)


def offset_point(position: Sequence[float], direction: Sequence[float], distance: float) -> Vec2:
    """Shift *position* by *distance* along the left normal of *direction*.

    Positive distances move left, negative distances move right.
    """
    nx, ny = left_normal(direction)
    return (position[0] + nx * distance, position[1] + ny * distance)


# Basis matrix of the cubic Bernstein polynomials, rows = t^0..t^3.
_BASIS = np.array(
    [
        [1.0, 0.0, 0.0, 0.0],
        [-3.0, 3.0, 0.0, 0.0],
        [3.0, -6.0, 3.0, 0.0],
        [-1.0, 3.0, -3.0, 1.0],
    ]
)


@dataclass(frozen=True)
class Bezier:
    """Cubic Bezier curve given by its four control points."""

    p0: Vec2
    p1: Vec2
    p2: Vec2
    p3: Vec2

    @classmethod
    def between(
        cls,
        a: Sequence[float],
        a_dir: Sequence[float],
        b: Sequence[float],
        b_dir: Sequence[float],
        offset: float = 0.0,
    ) -> "Bezier":
        """Curve from anchor *a* to anchor *b*, optionally shifted sideways.

        Parameters
        ----------
        a, b : (x, y)
            Anchor positions.
        a_dir, b_dir : (dx, dy)
            Travel directions at the anchors (need not be unit length).
        offset : float
            Lateral shift applied to both anchors; positive = left.
        """
        start = offset_point(a, a_dir, offset)
        end = offset_point(b, b_dir, offset)
        ta = unit(a_dir)
        tb = unit(b_dir)
        handle = math.hypot(end[0] - start[0], end[1] - start[1]) / 3.0
        return cls(
            p0=start,
            p1=(start[0] + ta[0] * handle, start[1] + ta[1] * handle),
            p2=(end[0] - tb[0] * handle, end[1] - tb[1] * handle),
            p3=end,
        )

    @property
    def control(self) -> np.ndarray:
        return np.array([self.p0, self.p1, self.p2, self.p3], dtype=float)

    def positions(self, ts: Sequence[float]) -> np.ndarray:
        """Positions at every parameter in *ts*, shape ``(len(ts), 2)``."""
        t = np.asarray(ts, dtype=float)
        powers = np.stack([np.ones_like(t), t, t * t, t * t * t], axis=-1)
        return powers @ _BASIS @ self.control

    def pos(self, t: float) -> np.ndarray:
        return self.positions([t])[0]

    def derivative(self, t: float) -> np.ndarray:
        c = self.control
        u = 1.0 - t
        return (
            3.0 * u * u * (c[1] - c[0])
            + 6.0 * u * t * (c[2] - c[1])
            + 3.0 * t * t * (c[3] - c[2])
        )

    def sample(self, steps: int) -> np.ndarray:
        """``steps + 1`` evenly spaced points from ``t = 0`` to ``t = 1``."""
        return self.positions(np.linspace(0.0, 1.0, steps + 1))

    def length(self, steps: int = 64) -> float:
        pts = self.sample(steps)
        return float(np.sum(np.linalg.norm(np.diff(pts, axis=0), axis=1)))
