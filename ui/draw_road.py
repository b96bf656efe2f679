"""
ui/draw_road.py
===============
Renders the road mesh published by the bridge: filled lane and
cross-section surfaces, cyan borders, the selected car's path in red,
and the streetlights.

The road layer only changes when the mesh version or the camera does, so
it is rasterised once into a cached surface and blitted every frame.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np
import pygame

from ui.helpers import draw_alpha_circle
from ui.types import Camera


class RoadRenderer:
    """Mixin that draws the road mesh and the streetlights."""

    _road_cache: Optional[pygame.Surface] = None
    _road_cache_key: Optional[Tuple[Any, ...]] = None

    # ------------------------------------------------------------------ #
    #  Mesh                                                                #
    # ------------------------------------------------------------------ #

    def draw_mesh(
        self,
        surface: pygame.Surface,
        camera: Camera,
        mesh: Dict[str, Any],
        version: int,
    ) -> None:
        key = (version,) + camera.state_key()
        if self._road_cache is None or self._road_cache_key != key:
            self._road_cache = self._rasterise_mesh(camera, mesh)
            self._road_cache_key = key
        surface.blit(self._road_cache, (0, 0))

    def _rasterise_mesh(self, camera: Camera, mesh: Dict[str, Any]) -> pygame.Surface:
        layer = pygame.Surface((camera.screen_w, camera.screen_h), pygame.SRCALPHA)
        vertices = mesh.get("vertices")
        if vertices is None or len(vertices) == 0:
            return layer
        screen = camera.world_to_screen_array(np.asarray(vertices, dtype=np.float64))

        triangles = np.asarray(mesh.get("triangles", ()), dtype=np.int64).reshape(-1, 3)
        for tri in triangles:
            pygame.draw.polygon(layer, self.ROAD_COLOR, screen[tri].tolist())

        self._draw_index_lines(layer, screen, mesh.get("borders", ()), self.BORDER_COLOR, self.BORDER_WIDTH_PX)
        self._draw_index_lines(layer, screen, mesh.get("chosen", ()), self.CHOSEN_COLOR, self.CHOSEN_WIDTH_PX)
        return layer

    @staticmethod
    def _draw_index_lines(
        layer: pygame.Surface,
        screen: np.ndarray,
        indices: Sequence[int],
        color: Tuple[int, int, int],
        width: int,
    ) -> None:
        pairs = np.asarray(indices, dtype=np.int64).reshape(-1, 2)
        for a, b in pairs:
            pygame.draw.line(layer, color, screen[a].tolist(), screen[b].tolist(), width)

    # ------------------------------------------------------------------ #
    #  Streetlights                                                        #
    # ------------------------------------------------------------------ #

    def draw_lights(
        self,
        surface: pygame.Surface,
        camera: Camera,
        lights: Sequence[Dict[str, Any]],
    ) -> None:
        for light in lights:
            sx, sy = camera.world_to_screen(light["x"], light["y"])
            self._draw_single_light(surface, camera, int(sx), int(sy), light["color"], light.get("held", False))

    def _draw_single_light(
        self,
        surface: pygame.Surface,
        camera: Camera,
        sx: int,
        sy: int,
        color: str,
        held: bool,
    ) -> None:
        bulb_r = max(2, int(0.8 * camera.zoom))
        spacing = int(bulb_r * 2.3)
        housing_w = bulb_r * 2 + 4
        housing_h = spacing * 2 + bulb_r * 2 + 4

        housing = pygame.Rect(sx - housing_w // 2, sy - housing_h // 2, housing_w, housing_h)
        pygame.draw.rect(surface, self.LIGHT_HOUSING_COLOR, housing, border_radius=max(1, bulb_r // 2))
        if held:
            pygame.draw.rect(surface, self.LIGHT_COLORS["RED"], housing, width=1, border_radius=max(1, bulb_r // 2))

        for bulb, by in (("RED", sy - spacing), ("YELLOW", sy), ("GREEN", sy + spacing)):
            lit = bulb == color
            c = self.LIGHT_COLORS[bulb] if lit else self.LIGHT_OFF_COLOR
            if lit:
                draw_alpha_circle(surface, c + (70,), (sx, by), bulb_r * 2)
            pygame.draw.circle(surface, c, (sx, by), bulb_r)

    # ------------------------------------------------------------------ #
    #  Add-mode marker                                                     #
    # ------------------------------------------------------------------ #

    def draw_pending_point(
        self,
        surface: pygame.Surface,
        camera: Camera,
        point: Optional[Sequence[float]],
    ) -> None:
        """Mark the first click of a car placement that awaits its destination."""
        if point is None:
            return
        sx, sy = camera.world_to_screen(point[0], point[1])
        r = max(4, int(camera.zoom * 1.2))
        draw_alpha_circle(surface, self.PENDING_POINT_COLOR + (90,), (int(sx), int(sy)), r * 2)
        pygame.draw.circle(surface, self.PENDING_POINT_COLOR, (int(sx), int(sy)), r, width=2)
