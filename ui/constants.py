#!/usr/bin/env python3
"""Visual constants shared across all renderers."""

from __future__ import annotations

from typing import Dict, Sequence, Tuple

from road.renderer import BORDER_COLOR, CHOSEN_COLOR, ROAD_COLOR

from .types import ColorRGB


class ViewConstants:
    """Mixin providing every visual / layout constant."""

    BG_COLOR: ColorRGB = (15, 15, 15)
    ROAD_COLOR: ColorRGB = ROAD_COLOR
    BORDER_COLOR: ColorRGB = BORDER_COLOR
    CHOSEN_COLOR: ColorRGB = CHOSEN_COLOR
    HUD_BG_COLOR: ColorRGB = (22, 22, 22)
    HUD_BORDER_COLOR: ColorRGB = (42, 42, 42)
    HUD_TEXT_COLOR: ColorRGB = (220, 220, 220)
    HUD_DIM_COLOR: ColorRGB = (130, 130, 130)
    SELECTED_OUTLINE_COLOR: ColorRGB = (255, 255, 255)
    PENDING_POINT_COLOR: ColorRGB = (255, 210, 0)

    LIGHT_COLORS: Dict[str, ColorRGB] = {
        "GREEN": (0, 220, 90),
        "YELLOW": (255, 200, 0),
        "RED": (230, 40, 40),
    }
    LIGHT_OFF_COLOR: ColorRGB = (45, 45, 45)
    LIGHT_HOUSING_COLOR: ColorRGB = (20, 20, 20)

    CAR_LENGTH_M = 4.5
    CAR_WIDTH_M = 1.8
    BORDER_WIDTH_PX = 1
    CHOSEN_WIDTH_PX = 3

    PAN_STEP_PX = 40
    ZOOM_STEP = 1.15

    BUTTON_W = 110
    BUTTON_H = 26

    KEY_HELP: Sequence[Tuple[str, str]] = (
        ("N", "add normal car"),
        ("S", "add slow car"),
        ("ESC", "cancel adding"),
        ("CLICK", "place / select"),
        ("SPACE", "pause"),
        ("R", "reset"),
        ("F", "fit view"),
        ("ARROWS", "pan"),
        ("WHEEL +/-", "zoom"),
        ("H", "toggle help"),
        ("Q", "quit"),
    )
