"""
ui/types.py
===========
Lightweight data containers used across every UI module.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

ColorRGB = Tuple[int, int, int]
ColorRGBA = Tuple[int, int, int, int]


@dataclass
class Camera:
    """Viewport mapping world coordinates (m, y up) to screen pixels (y down)."""
    screen_w: int
    screen_h: int
    world_x: float = 0.0
    world_y: float = 0.0
    zoom: float = 3.0

    MIN_ZOOM = 0.5
    MAX_ZOOM = 20.0

    def world_to_screen(self, wx: float, wy: float) -> Tuple[float, float]:
        cx = self.screen_w / 2
        cy = self.screen_h / 2
        sx = cx + (wx - self.world_x) * self.zoom
        sy = cy - (wy - self.world_y) * self.zoom
        return sx, sy

    def screen_to_world(self, sx: float, sy: float) -> Tuple[float, float]:
        cx = self.screen_w / 2
        cy = self.screen_h / 2
        wx = (sx - cx) / self.zoom + self.world_x
        wy = -((sy - cy) / self.zoom) + self.world_y
        return wx, wy

    def world_to_screen_array(self, points: np.ndarray) -> np.ndarray:
        """Vectorised :meth:`world_to_screen` for an ``(n, 2)`` array."""
        out = np.empty((len(points), 2), dtype=np.float64)
        out[:, 0] = self.screen_w / 2 + (points[:, 0] - self.world_x) * self.zoom
        out[:, 1] = self.screen_h / 2 - (points[:, 1] - self.world_y) * self.zoom
        return out

    def zoom_by(self, factor: float) -> None:
        self.zoom = min(self.MAX_ZOOM, max(self.MIN_ZOOM, self.zoom * factor))

    def pan(self, dx_px: float, dy_px: float) -> None:
        """Move the view by a screen-space offset."""
        self.world_x += dx_px / self.zoom
        self.world_y -= dy_px / self.zoom

    def fit(self, points: np.ndarray, margin_px: int = 40) -> None:
        """Centre on *points* and zoom so they all fit inside the window."""
        if len(points) == 0:
            return
        lo = points.min(axis=0)
        hi = points.max(axis=0)
        self.world_x = float(lo[0] + hi[0]) / 2
        self.world_y = float(lo[1] + hi[1]) / 2
        span_x = max(float(hi[0] - lo[0]), 1.0)
        span_y = max(float(hi[1] - lo[1]), 1.0)
        usable_w = max(1, self.screen_w - 2 * margin_px)
        usable_h = max(1, self.screen_h - 2 * margin_px)
        self.zoom = min(self.MAX_ZOOM, max(self.MIN_ZOOM, min(usable_w / span_x, usable_h / span_y)))

    def state_key(self) -> Tuple[int, int, float, float, float]:
        return (self.screen_w, self.screen_h, self.world_x, self.world_y, self.zoom)


@dataclass
class ButtonRect:
    """Stores a button's screen rect and label for click detection."""
    label: str
    x: int
    y: int
    w: int
    h: int

    def contains(self, mx: int, my: int) -> bool:
        return self.x <= mx <= self.x + self.w and self.y <= my <= self.y + self.h

    def as_tuple(self) -> Sequence[int]:
        return (self.x, self.y, self.w, self.h)
