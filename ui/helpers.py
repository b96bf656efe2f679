"""
ui/helpers.py
=============
Pure utility functions shared across UI modules:
interpolation between bridge snapshots, alpha-surface drawing and text.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Tuple

import pygame


# ── Interpolation helpers ─────────────────────────────────────────────────────

def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def angle_lerp(a: float, b: float, t: float) -> float:
    """Shortest-arc angle interpolation (radians, result in (-pi, pi])."""
    diff = math.atan2(math.sin(b - a), math.cos(b - a))
    out = a + diff * t
    return math.atan2(math.sin(out), math.cos(out))


def interpolate_vehicles(
    prev: List[Dict[str, Any]],
    curr: List[Dict[str, Any]],
    t: float,
) -> List[Dict[str, Any]]:
    """Return a new vehicle list with poses lerped from *prev* to *curr*.

    Vehicles missing from *prev* are drawn at their current pose; vehicles
    missing from *curr* are gone.
    """
    if not prev:
        return curr
    t = min(1.0, max(0.0, t))
    prev_map = {v["id"]: v for v in prev}
    result = []
    for v in curr:
        p = prev_map.get(v["id"])
        if p is None:
            result.append(v)
            continue
        out = dict(v)
        out["x"] = lerp(p["x"], v["x"], t)
        out["y"] = lerp(p["y"], v["y"], t)
        out["speed"] = lerp(p["speed"], v["speed"], t)
        out["heading"] = angle_lerp(p["heading"], v["heading"], t)
        result.append(out)
    return result


# ── Alpha drawing helpers ────────────────────────────────────────────────────
# pygame.draw ignores alpha on opaque targets, so translucent shapes are
# drawn on a scratch SRCALPHA surface and blitted.

def _scratch(w: int, h: int) -> pygame.Surface:
    return pygame.Surface((max(1, w), max(1, h)), pygame.SRCALPHA)


def draw_alpha_rect(
    target: pygame.Surface,
    color: Tuple[int, ...],
    rect: pygame.Rect,
    border_radius: int = 0,
) -> None:
    """Translucent rectangle; *color* carries the alpha channel."""
    layer = _scratch(rect.w, rect.h)
    pygame.draw.rect(layer, color, layer.get_rect(), border_radius=border_radius)
    target.blit(layer, rect.topleft)


def draw_alpha_circle(
    target: pygame.Surface,
    color: Tuple[int, ...],
    centre: Tuple[int, int],
    radius: int,
) -> None:
    """Translucent disc, used for light glows and the pending-point marker."""
    if radius < 1:
        return
    layer = _scratch(2 * radius, 2 * radius)
    pygame.draw.circle(layer, color, (radius, radius), radius)
    target.blit(layer, layer.get_rect(center=centre))

# ── Text helper ──────────────────────────────────────────────────────────────

def render_text(
    surface: pygame.Surface,
    font: pygame.font.Font,
    text: str,
    pos: Tuple[int, int],
    color: Tuple[int, ...] = (230, 230, 235),
    anchor: str = "topleft",
) -> pygame.Rect:
    """Render text with flexible *anchor* ('topleft', 'center', 'midright' …)."""
    img = font.render(text, True, color)
    rect = img.get_rect(**{anchor: pos})
    surface.blit(img, rect)
    return rect
