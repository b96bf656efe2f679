#!/usr/bin/env python3
"""
sim/signals.py
==============
Streetlights gating the cross-sections of a junction.

Each :class:`TrafficLight` cycles GREEN → YELLOW → all-RED clearance over
its approach groups, one group at a time.  A cross-section ``X → J → Y``
is *gated* while the light at ``J`` does not show GREEN to approach ``X``.
Timers are staggered by half a green phase between junctions so that
lights do not switch in lock-step.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from road.backbone import Backbone, LocationId
from road.geometry import RoadGeometry, SegmentKey
from sim.traffic_policy import DrivingPolicy

log = logging.getLogger("signals")


class LightColor(str, Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"


class TrafficLight:
    """Fixed-cycle light at one junction.

    Parameters
    ----------
    location_id : int
        Junction the light controls.
    name : str
        Junction name, for logs and snapshots.
    phases : sequence of tuples
        Approach-location groups that share a green phase, in cycle order.
    position : (x, y)
        Where front-ends draw the light.
    policy : DrivingPolicy
        Phase durations and the automatic-cycling switch.
    offset_s : float
        Extra time added to the first green phase.
    """

    def __init__(
        self,
        location_id: LocationId,
        name: str,
        phases: Sequence[Tuple[LocationId, ...]],
        position: Tuple[float, float],
        policy: DrivingPolicy,
        offset_s: float = 0.0,
    ) -> None:
        self.location_id = location_id
        self.name = name
        self.phases: List[Tuple[LocationId, ...]] = [tuple(p) for p in phases]
        self.position = position
        self.policy = policy
        self.phase_index = 0
        self.color = LightColor.GREEN
        self.timer = policy.semaphore_green_s + offset_s
        self.held = False

    def update(self, dt: float) -> None:
        if self.held or not self.policy.semaphore_enabled:
            return
        self.timer -= dt
        if self.timer > 0.0:
            return
        if self.color is LightColor.GREEN:
            self.color = LightColor.YELLOW
            self.timer = self.policy.semaphore_yellow_s
        elif self.color is LightColor.YELLOW:
            self.color = LightColor.RED
            self.timer = self.policy.semaphore_red_clearance_s
        else:
            self.phase_index = (self.phase_index + 1) % len(self.phases)
            self.color = LightColor.GREEN
            self.timer = self.policy.semaphore_green_s
        log.debug("%s → %s (phase %d)", self.name, self.color.value, self.phase_index)

    def color_for(self, approach: LocationId) -> LightColor:
        """Colour shown to traffic arriving from *approach*."""
        if self.held:
            return LightColor.RED
        if not self.policy.semaphore_enabled:
            return LightColor.GREEN
        if approach in self.phases[self.phase_index]:
            return self.color
        return LightColor.RED

    def hold(self) -> None:
        """Show red to every approach until :meth:`release`."""
        self.held = True

    def release(self) -> None:
        self.held = False

    def as_dict(self) -> Dict[str, Any]:
        return {
            "location": self.name,
            "x": round(self.position[0], 3),
            "y": round(self.position[1], 3),
            "phase": self.phase_index,
            "color": LightColor.RED.value if self.held else self.color.value,
            "held": self.held,
            "timer": round(self.timer, 1),
        }


class TrafficControls:
    """All streetlights of one road geometry."""

    def __init__(
        self,
        backbone: Backbone,
        geometry: RoadGeometry,
        policy: DrivingPolicy,
    ) -> None:
        self.policy = policy
        self.lights: Dict[LocationId, TrafficLight] = {}
        offset = 0.0
        for light_def in backbone.streetlights:
            crosses = geometry.cross_sections_through(light_def.location_id)
            phases = list(light_def.phases) or [
                (approach,) for approach in sorted({c.from_id for c in crosses})
            ]
            name = backbone.name_of(light_def.location_id)
            if not phases:
                log.warning("streetlight at %s controls no approach; ignored", name)
                continue
            self.lights[light_def.location_id] = TrafficLight(
                location_id=light_def.location_id,
                name=name,
                phases=phases,
                position=_light_position(geometry, crosses),
                policy=policy,
                offset_s=offset,
            )
            offset += policy.semaphore_green_s / 2.0
        log.info("traffic controls: %d streetlights", len(self.lights))

    def update(self, dt: float) -> None:
        for light in self.lights.values():
            light.update(dt)

    def light_at(self, location_id: LocationId) -> Optional[TrafficLight]:
        return self.lights.get(location_id)

    def is_gated(self, key: SegmentKey) -> bool:
        """True while cars must not enter the connector *key*."""
        if not key.is_cross_section:
            return False
        light = self.lights.get(key.across_id)
        if light is None:
            return False
        return light.color_for(key.from_id) is not LightColor.GREEN

    def hold(self, location_id: LocationId) -> None:
        self.lights[location_id].hold()

    def release(self, location_id: LocationId) -> None:
        self.lights[location_id].release()

    def snapshot(self) -> List[Dict[str, Any]]:
        return [light.as_dict() for light in self.lights.values()]


def _light_position(geometry: RoadGeometry, crosses) -> Tuple[float, float]:
    """Centre of the connector entry points, or the origin when there are none."""
    if not crosses:
        return (0.0, 0.0)
    xs, ys = [], []
    for cross in crosses:
        point, _ = cross.pose(0.0)
        xs.append(float(point[0]))
        ys.append(float(point[1]))
    return (sum(xs) / len(xs), sum(ys) / len(ys))
