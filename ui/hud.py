#!/usr/bin/env python3
"""HUD panel, add-mode buttons, key help and pause banner (mixin)."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

import pygame

from ui.helpers import draw_alpha_rect, render_text
from ui.types import ButtonRect

_ADD_MODE_PROMPTS = {
    "IDLE": "click a car to show its path",
    "AWAITING_FIRST_POINT": "click the start point",
    "AWAITING_SECOND_POINT": "click the destination",
}


class HudRenderer:
    """Mixin that draws every overlay / HUD element."""

    # ------------------------------------------------------------------ #
    #  Buttons                                                             #
    # ------------------------------------------------------------------ #

    def hud_buttons(self) -> List[ButtonRect]:
        """Clickable add-car buttons in the top-left corner."""
        x, y = 16, 16
        return [
            ButtonRect("ADD NORMAL", x, y, self.BUTTON_W, self.BUTTON_H),
            ButtonRect("ADD SLOW", x + self.BUTTON_W + 8, y, self.BUTTON_W, self.BUTTON_H),
        ]

    def _draw_buttons(self, surface: pygame.Surface, add_state: Mapping[str, Any]) -> None:
        adding = add_state.get("mode", "IDLE") != "IDLE"
        active_label = "ADD SLOW" if add_state.get("car_type") == "SLOW" else "ADD NORMAL"
        for button in self.hud_buttons():
            rect = pygame.Rect(*button.as_tuple())
            active = adding and button.label == active_label
            pygame.draw.rect(surface, (60, 60, 70) if active else self.HUD_BG_COLOR, rect, border_radius=4)
            pygame.draw.rect(surface, self.PENDING_POINT_COLOR if active else self.HUD_BORDER_COLOR,
                             rect, width=1, border_radius=4)
            render_text(surface, self.font_tiny, button.label, rect.center, self.HUD_TEXT_COLOR, anchor="center")

    # ------------------------------------------------------------------ #
    #  Main HUD panel                                                      #
    # ------------------------------------------------------------------ #

    def draw_hud(
        self,
        surface: pygame.Surface,
        status: Mapping[str, Any],
        add_state: Mapping[str, Any],
        vehicles: Sequence[Dict[str, Any]],
    ) -> None:
        if self.font_small is None or self.font_tiny is None:
            return
        self._draw_buttons(surface, add_state)

        mode = add_state.get("mode", "IDLE")
        lines = [
            f"TICK {status.get('tick', 0)}   VEHICLES {status.get('vehicle_count', len(vehicles))}",
        ]
        if mode != "IDLE":
            lines.append(f"ADDING {add_state.get('car_type', 'NORMAL')} CAR")
        lines.append(_ADD_MODE_PROMPTS.get(mode, mode).upper())

        chosen = self._chosen_vehicle(vehicles, status.get("chosen"))
        if chosen is not None:
            lines.append(f"{chosen['id']}  {chosen['state']}  {chosen['speed']:.1f} KM/H")
            lines.append(f"DEVIATION {chosen['deviation']:.2f}  STEER {chosen['steering']:+.2f}")
            lines.append(f"REMAINING {chosen['remaining']:.1f} M")

        row_h = 16
        panel = pygame.Rect(16, self.height - 16 - 12 - row_h * len(lines), 300, 12 + row_h * len(lines))
        draw_alpha_rect(surface, self.HUD_BG_COLOR + (220,), panel, border_radius=6)
        pygame.draw.rect(surface, self.HUD_BORDER_COLOR, panel, width=1, border_radius=6)
        y = panel.y + 6
        for i, line in enumerate(lines):
            color = self.PENDING_POINT_COLOR if (i == 1 and mode != "IDLE") else self.HUD_TEXT_COLOR
            render_text(surface, self.font_tiny, line, (panel.x + 10, y), color)
            y += row_h

    @staticmethod
    def _chosen_vehicle(
        vehicles: Sequence[Dict[str, Any]], chosen_id: Optional[str]
    ) -> Optional[Dict[str, Any]]:
        if chosen_id is None:
            return None
        for vehicle in vehicles:
            if vehicle["id"] == chosen_id:
                return vehicle
        return None

    # ------------------------------------------------------------------ #
    #  Key help                                                            #
    # ------------------------------------------------------------------ #

    def _draw_help(self, surface: pygame.Surface) -> None:
        if self.font_tiny is None:
            return
        row_h = 14
        x = self.width - 190
        y = 16
        panel = pygame.Rect(x - 8, y - 6, 182, len(self.KEY_HELP) * row_h + 12)
        draw_alpha_rect(surface, self.HUD_BG_COLOR + (200,), panel, border_radius=4)
        for key, action in self.KEY_HELP:
            render_text(surface, self.font_tiny, key, (x, y), self.HUD_TEXT_COLOR)
            render_text(surface, self.font_tiny, action, (x + 70, y), self.HUD_DIM_COLOR)
            y += row_h

    # ------------------------------------------------------------------ #
    #  Pause banner                                                        #
    # ------------------------------------------------------------------ #

    def _draw_pause_banner(self, surface: pygame.Surface) -> None:
        overlay = pygame.Surface((self.width, self.height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 100))
        surface.blit(overlay, (0, 0))
        if self.font_title:
            text = self.font_title.render("PAUSED", True, (220, 220, 220))
            surface.blit(text, text.get_rect(center=(self.width // 2, self.height // 2)))
