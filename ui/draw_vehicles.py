#!/usr/bin/env python3
"""Vehicle sprite rendering (mixin)."""

from __future__ import annotations

import math
from typing import Any, Dict, Sequence

import pygame

from .types import Camera, ColorRGB


class VehicleRenderer:
    """Mixin that draws cars oriented along their heading."""

    def draw_vehicles(
        self,
        surface: pygame.Surface,
        camera: Camera,
        vehicles: Sequence[Dict[str, Any]],
    ) -> None:
        # Selected car last so its outline stays on top.
        for vehicle in sorted(vehicles, key=lambda v: bool(v.get("selected"))):
            self.draw_vehicle(surface, camera, vehicle)

    def draw_vehicle(self, surface: pygame.Surface, camera: Camera, vehicle: Dict[str, Any]) -> None:
        w = max(6, int(self.CAR_LENGTH_M * camera.zoom))
        h = max(3, int(self.CAR_WIDTH_M * camera.zoom))
        color: ColorRGB = tuple(vehicle.get("color", (255, 255, 255)))
        sprite = pygame.Surface((w, h), pygame.SRCALPHA)

        # Body
        body = pygame.Rect(0, 0, w, h)
        pygame.draw.rect(sprite, color, body, border_radius=max(1, h // 4))

        # Windshield
        r, g, b = color
        glass = (max(0, r - 60), max(0, g - 60), max(0, b - 60), 180)
        ws_w = max(2, w // 4)
        pygame.draw.rect(sprite, glass, (w - ws_w - 2, 1, ws_w, max(1, h - 2)), border_radius=2)

        # Brake lights while stopped at a signal
        if vehicle.get("state") == "STOPPED_AT_SIGNAL":
            tl = max(1, h // 5)
            pygame.draw.circle(sprite, (255, 40, 40), (tl, tl), tl)
            pygame.draw.circle(sprite, (255, 40, 40), (tl, h - tl - 1), tl)

        outline = self.SELECTED_OUTLINE_COLOR if vehicle.get("selected") else (235, 235, 235)
        pygame.draw.rect(sprite, outline, body, width=2 if vehicle.get("selected") else 1,
                         border_radius=max(1, h // 4))

        # World heading is CCW with y up; pygame rotates CCW on screen.
        rotated = pygame.transform.rotate(sprite, math.degrees(vehicle.get("heading", 0.0)))
        sx, sy = camera.world_to_screen(vehicle["x"], vehicle["y"])
        surface.blit(rotated, rotated.get_rect(center=(int(sx), int(sy))))
