#!/usr/bin/env python3

from .types import ButtonRect, Camera, ColorRGB, ColorRGBA
from .constants import ViewConstants
from .draw_road import RoadRenderer
from .draw_vehicles import VehicleRenderer
from .hud import HudRenderer
from .pygame_view import RoadSimView, command_for_key, run_pygame_view

__all__ = [
    "ButtonRect",
    "Camera",
    "ColorRGB",
    "ColorRGBA",
    "ViewConstants",
    "RoadRenderer",
    "VehicleRenderer",
    "HudRenderer",
    "RoadSimView",
    "command_for_key",
    "run_pygame_view",
]
