#!/usr/bin/env python3
"""
sim/world.py
============
Composition root of the simulation.

The :class:`World` builds backbone → geometry → mesh, the streetlights and
the car system, and advances them together with :meth:`World.update_physics`.
Commands from the input layer are applied with :meth:`World.handle`
between steps; the road network can be swapped with
:meth:`World.set_backbone`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from road.backbone import Backbone, default_backbone
from road.geometry import RoadGeometry
from road.renderer import RoadMesh
from sim.car import Car
from sim.car_system import CarSystem
from sim.commands import Command
from sim.signals import TrafficControls
from sim.traffic_policy import DrivingPolicy

log = logging.getLogger("world")


class World:
    """Road network, traffic controls and cars advanced in lock-step.

    Parameters
    ----------
    backbone : Backbone or None
        The road layout.  Uses :func:`~road.backbone.default_backbone`
        when *None*.
    policy : DrivingPolicy or None
        Tunable constants; uses defaults when *None*.
    """

    def __init__(
        self,
        backbone: Optional[Backbone] = None,
        policy: Optional[DrivingPolicy] = None,
    ) -> None:
        self.policy = policy or DrivingPolicy()
        self.mesh = RoadMesh()
        self._tick_count = 0
        self._build(backbone or default_backbone())
        self.cars = CarSystem(self.geometry, self.controls, self.policy)

    def _build(self, backbone: Backbone) -> None:
        self.backbone = backbone
        self.geometry = RoadGeometry(
            backbone,
            half_width=self.policy.lane_half_width_m,
            subdivisions=self.policy.bezier_subdivisions,
            arc_samples=self.policy.arc_length_samples,
        )
        self.controls = TrafficControls(backbone, self.geometry, self.policy)
        self.mesh.build(self.geometry)

    # ── commands ──────────────────────────────────────────────────────────

    def handle(self, command: Command) -> Optional[Car]:
        car = self.cars.handle(command)
        self._sync_chosen_path()
        return car

    def set_backbone(self, backbone: Backbone) -> None:
        """Replace the road network; cars whose path vanished are dropped."""
        self._build(backbone)
        self.cars.set_geometry(self.geometry, self.controls)
        # A rebuilt mesh starts without highlight; restore it
        self.mesh.set_chosen_path(self._chosen_segments())
        self.cars.take_chosen_path_changed()

    # ── physics tick ──────────────────────────────────────────────────────

    def update_physics(self, dt: float = 0.05) -> None:
        """Advance lights and cars by *dt* seconds."""
        self._tick_count += 1
        self.controls.update(dt)
        self.cars.update(dt)
        self._sync_chosen_path()

    def _sync_chosen_path(self) -> None:
        if self.cars.take_chosen_path_changed():
            self.mesh.set_chosen_path(self._chosen_segments())

    def _chosen_segments(self):
        path = self.cars.chosen_path
        return path.segments if path is not None else None

    # ── queries ───────────────────────────────────────────────────────────

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def snapshot(self) -> Dict[str, Any]:
        """Plain-data view of everything a front-end draws, except the mesh."""
        return {
            "tick": self._tick_count,
            "vehicles": self.cars.snapshot(),
            "lights": self.controls.snapshot(),
            "add_state": self.cars.add_state.as_dict(),
            "chosen": self.cars.chosen_car_id,
        }
