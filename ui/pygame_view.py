#!/usr/bin/env python3
"""
Main view class — combines all UI mixins into one runnable Pygame window.

Module layout
─────────────
    ui/
    ├── types.py           – ColorRGB, Camera, ButtonRect
    ├── constants.py       – ViewConstants mixin (all class-level constants)
    ├── helpers.py         – interpolation, alpha drawing, text
    ├── draw_road.py       – RoadRenderer mixin (mesh, chosen path, lights)
    ├── draw_vehicles.py   – VehicleRenderer mixin (oriented car sprites)
    ├── hud.py             – HudRenderer mixin  (HUD, buttons, help, pause)
    └── pygame_view.py     – RoadSimView (this file – main loop)

The view never touches the world directly: it reads snapshots from a
:class:`~sim.sim_bridge.SimBridge` and sends :mod:`sim.commands` back.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import numpy as np
import pygame

from sim.car import CarType
from sim.commands import Cancel, Click, Command, StartAdding

from .constants import ViewConstants
from .draw_road import RoadRenderer
from .draw_vehicles import VehicleRenderer
from .helpers import interpolate_vehicles
from .hud import HudRenderer
from .types import Camera

_KEY_COMMANDS: Dict[int, Command] = {
    pygame.K_n: StartAdding(CarType.NORMAL),
    pygame.K_s: StartAdding(CarType.SLOW),
    pygame.K_ESCAPE: Cancel(),
}

_BUTTON_COMMANDS: Dict[str, Command] = {
    "ADD NORMAL": StartAdding(CarType.NORMAL),
    "ADD SLOW": StartAdding(CarType.SLOW),
}


def command_for_key(key: int) -> Optional[Command]:
    """Command bound to keyboard *key*, if any."""
    return _KEY_COMMANDS.get(key)


class RoadSimView(
    ViewConstants,
    RoadRenderer,
    VehicleRenderer,
    HudRenderer,
):
    """Road-network visualiser powered by Pygame.

    Inherits drawing logic from focused mixin modules so each file
    stays small and single-purpose.
    """

    def __init__(self, bridge: Any, width: int = 1000, height: int = 700, fps: int = 60):
        self.bridge = bridge
        self.width = width
        self.height = height
        self.fps = fps

        self.screen: Optional[pygame.Surface] = None
        self.clock: Optional[pygame.time.Clock] = None
        self.font_small: Optional[pygame.font.Font] = None
        self.font_tiny: Optional[pygame.font.Font] = None
        self.font_title: Optional[pygame.font.Font] = None

        self.camera = Camera(width, height)
        self.paused = False
        self.show_help = True

        self._mesh_version = -1
        self._mesh: Dict[str, Any] = {}
        self._fitted = False
        self._last_tick = -1
        self._prev_vehicles: List[Dict[str, Any]] = []
        self._curr_vehicles: List[Dict[str, Any]] = []
        self._since_tick = 0.0

    # ------------------------------------------------------------------ #
    #  Resize / fonts                                                      #
    # ------------------------------------------------------------------ #
    def _handle_resize(self, new_w: int, new_h: int) -> None:
        self.width = max(400, new_w)
        self.height = max(300, new_h)
        self.camera.screen_w = self.width
        self.camera.screen_h = self.height
        self.screen = pygame.display.set_mode((self.width, self.height), pygame.RESIZABLE)

    @staticmethod
    def _load_font(size: int, bold: bool = False) -> pygame.font.Font:
        return pygame.font.SysFont("consolas,menlo,dejavusansmono,monospace", size, bold=bold)

    # ------------------------------------------------------------------ #
    #  Input                                                               #
    # ------------------------------------------------------------------ #
    def _on_key(self, key: int) -> bool:
        """Handle a key press; returns False when the window should close."""
        command = command_for_key(key)
        if command is not None:
            self.bridge.send(command)
        elif key == pygame.K_SPACE:
            self.paused = not self.paused
            self.bridge.set_paused(self.paused)
        elif key == pygame.K_r:
            self.paused = False
            self._prev_vehicles = []
            self._curr_vehicles = []
            self.bridge.reset()
            self.bridge.set_paused(False)
        elif key == pygame.K_f:
            self._fit_view()
        elif key == pygame.K_h:
            self.show_help = not self.show_help
        elif key in (pygame.K_EQUALS, pygame.K_PLUS):
            self.camera.zoom_by(self.ZOOM_STEP)
        elif key == pygame.K_MINUS:
            self.camera.zoom_by(1.0 / self.ZOOM_STEP)
        elif key == pygame.K_LEFT:
            self.camera.pan(-self.PAN_STEP_PX, 0)
        elif key == pygame.K_RIGHT:
            self.camera.pan(self.PAN_STEP_PX, 0)
        elif key == pygame.K_UP:
            self.camera.pan(0, -self.PAN_STEP_PX)
        elif key == pygame.K_DOWN:
            self.camera.pan(0, self.PAN_STEP_PX)
        elif key == pygame.K_q:
            return False
        return True

    def _on_click(self, mx: int, my: int) -> None:
        for button in self.hud_buttons():
            if button.contains(mx, my):
                self.bridge.send(_BUTTON_COMMANDS[button.label])
                return
        wx, wy = self.camera.screen_to_world(mx, my)
        self.bridge.send(Click(wx, wy))

    # ------------------------------------------------------------------ #
    #  Bridge polling                                                      #
    # ------------------------------------------------------------------ #
    def _poll_mesh(self) -> None:
        version, mesh = self.bridge.get_mesh()
        if version != self._mesh_version:
            self._mesh_version = version
            self._mesh = mesh
            if not self._fitted:
                self._fit_view()

    def _fit_view(self) -> None:
        vertices = self._mesh.get("vertices")
        if vertices is not None and len(vertices):
            self.camera.fit(np.asarray(vertices, dtype=np.float64))
            self._fitted = True

    def _poll_vehicles(self, status: Dict[str, Any], delta_time: float) -> List[Dict[str, Any]]:
        tick = status.get("tick", 0)
        if tick != self._last_tick:
            self._last_tick = tick
            self._prev_vehicles = self._curr_vehicles
            self._curr_vehicles = self.bridge.get_vehicles()
            self._since_tick = 0.0
        else:
            self._since_tick += delta_time
            # Selection and colours can change without a tick while paused.
            if self.paused:
                self._curr_vehicles = self.bridge.get_vehicles()
                self._prev_vehicles = []
        t = self._since_tick * self.bridge.tick_rate_hz
        return interpolate_vehicles(self._prev_vehicles, self._curr_vehicles, t)

    # ------------------------------------------------------------------ #
    #  Main loop                                                           #
    # ------------------------------------------------------------------ #
    def run(self) -> None:
        pygame.init()
        pygame.display.set_caption("ROAD NETWORK SIM")
        self.screen = pygame.display.set_mode((self.width, self.height), pygame.RESIZABLE)
        self.clock = pygame.time.Clock()
        self.font_small = self._load_font(13)
        self.font_tiny = self._load_font(11)
        self.font_title = self._load_font(28, bold=True)

        running = True
        while running:
            delta_time = self.clock.tick(self.fps) / 1000.0

            # ---- events ------------------------------------------------- #
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.VIDEORESIZE:
                    self._handle_resize(event.w, event.h)
                elif event.type == pygame.KEYDOWN:
                    running = self._on_key(event.key) and running
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    self._on_click(*event.pos)
                elif event.type == pygame.MOUSEWHEEL:
                    self.camera.zoom_by(self.ZOOM_STEP if event.y > 0 else 1.0 / self.ZOOM_STEP)

            # ---- snapshots ---------------------------------------------- #
            self._poll_mesh()
            status = self.bridge.get_status()
            add_state = self.bridge.get_add_state()
            vehicles = self._poll_vehicles(status, delta_time)
            lights = self.bridge.get_lights()

            # ---- render ------------------------------------------------- #
            self.screen.fill(self.BG_COLOR)
            self.draw_mesh(self.screen, self.camera, self._mesh, self._mesh_version)
            self.draw_lights(self.screen, self.camera, lights)
            self.draw_vehicles(self.screen, self.camera, vehicles)
            self.draw_pending_point(self.screen, self.camera, add_state.get("first_point"))

            self.draw_hud(self.screen, status, add_state, vehicles)
            if self.show_help:
                self._draw_help(self.screen)
            if self.paused:
                self._draw_pause_banner(self.screen)

            pygame.display.flip()

        pygame.quit()


# ---------------------------------------------------------------------- #
#  Convenience entry point                                                 #
# ---------------------------------------------------------------------- #
def run_pygame_view(
    bridge: Any, width: int = 1000, height: int = 700, fps: int = 60
) -> None:
    view = RoadSimView(bridge=bridge, width=width, height=height, fps=fps)
    view.run()
