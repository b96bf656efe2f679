#!/usr/bin/env python3
"""
sim/car_system.py
=================
Owner of every live car: placement, selection and the per-tick update.

Each tick runs in two phases.  First a read-only snapshot of every car's
position along its path is taken; then every car is stepped using only
its own record plus that snapshot, so the outcome does not depend on the
order cars are visited in.  Per car the step is:

1. signal transitions (GO_NORMAL/SLOW ⇄ STOPPED_AT_SIGNAL),
2. target speed and acceleration/braking,
3. advance progress along the path (clamped at a stop line),
4. lateral deviation from the centreline at the new progress,
5. fuzzy steering correction and heading/position integration,
6. removal once the end of the path is reached.

The chosen path shown by front-ends belongs here: it is the path of the
selected car, and :meth:`CarSystem.take_chosen_path_changed` reports when
it changed.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from fuzzy.steering import SteeringController
from road.geometry import RoadGeometry, SegmentKey
from road.planner import Path, find_path
from sim.car import AddMode, AddState, Car, CarState, CarType, driving_state
from sim.commands import Cancel, Click, Command, StartAdding
from sim.physics import (
    heading_of,
    kmh_to_mps,
    lateral_offset,
    normalized_deviation,
    wrap_angle,
)
from sim.signals import TrafficControls
from sim.traffic_policy import DrivingPolicy, cruise_speed_kmh

log = logging.getLogger("car_system")


@dataclass(frozen=True)
class _PathPosition:
    """Where a car was on its path at the start of the tick."""

    progress: float
    index: int
    key: SegmentKey
    offset: float


class CarSystem:
    """Live cars on one road geometry.

    Parameters
    ----------
    geometry : RoadGeometry
        Network the cars drive on; read-only during a tick.
    controls : TrafficControls
        Streetlights gating cross-sections.
    policy : DrivingPolicy or None
        Tunable constants; uses defaults when *None*.
    steering : SteeringController or None
        Lane-keeping controller; a fresh one when *None*.
    """

    def __init__(
        self,
        geometry: RoadGeometry,
        controls: TrafficControls,
        policy: Optional[DrivingPolicy] = None,
        steering: Optional[SteeringController] = None,
    ) -> None:
        self.geometry = geometry
        self.controls = controls
        self.policy = policy or DrivingPolicy()
        self.steering = steering or SteeringController()
        self.cars: List[Car] = []
        self.add_state = AddState()
        self.chosen_car_id: Optional[str] = None
        self._chosen_changed = False
        self._next_id = 0
        self._tick = 0

    # ── commands ──────────────────────────────────────────────────────────

    def handle(self, command: Command) -> Optional[Car]:
        """Apply one external command; returns the car it placed, if any."""
        if isinstance(command, Click):
            return self._on_click((command.x, command.y))
        if isinstance(command, StartAdding):
            self.add_state = AddState(AddMode.AWAITING_FIRST_POINT, command.car_type)
            log.info("adding a %s car: waiting for the first point", command.car_type.value)
        elif isinstance(command, Cancel):
            if self.add_state.mode is not AddMode.IDLE:
                log.info("car placement cancelled")
            self.add_state = AddState()
        else:
            raise TypeError(f"unsupported command {command!r}")
        return None

    def _on_click(self, point: Sequence[float]) -> Optional[Car]:
        state = self.add_state
        if state.mode is AddMode.IDLE:
            self.select(self.car_near(point))
            return None
        if state.mode is AddMode.AWAITING_FIRST_POINT:
            self.add_state = AddState(
                AddMode.AWAITING_SECOND_POINT,
                state.car_type,
                first_point=(float(point[0]), float(point[1])),
            )
            return None
        self.add_state = AddState()
        return self.place(state.first_point, point, state.car_type)

    # ── placement / selection ─────────────────────────────────────────────

    def place(
        self,
        start: Sequence[float],
        end: Sequence[float],
        car_type: CarType = CarType.NORMAL,
    ) -> Optional[Car]:
        """Plan from *start* to *end* and put a car at *start*.

        Returns ``None`` (after a warning) when no route exists.
        """
        path = find_path(
            self.geometry,
            start,
            end,
            snap_radius=self.policy.snap_radius_m,
            max_expansions=self.policy.planner_max_expansions,
        )
        if path is None:
            log.warning(
                "Error while choosing points to add a car: no path from "
                "(%.1f, %.1f) to (%.1f, %.1f)",
                start[0], start[1], end[0], end[1],
            )
            return None
        return self.spawn(path, car_type, position=start)

    def spawn(
        self,
        path: Path,
        car_type: CarType = CarType.NORMAL,
        position: Optional[Sequence[float]] = None,
    ) -> Car:
        """Create a car at the start of *path* (or at *position*)."""
        center, tangent = path.pose(self.geometry, 0.0)
        x, y = center if position is None else position
        car = Car(
            id=f"CAR_{self._next_id:03d}",
            car_type=car_type,
            path=path,
            x=float(x),
            y=float(y),
            heading=heading_of(tangent),
        )
        self._next_id += 1
        car.state = driving_state(car_type)
        car.resume_state = car.state
        self.cars.append(car)
        log.info(
            "placed %s (%s) on %d segments, %.1f m",
            car.id, car_type.value, len(path.segments), path.length,
        )
        return car

    def car_near(self, point: Sequence[float]) -> Optional[Car]:
        """Closest car within the selection radius of *point*."""
        best: Optional[Car] = None
        best_d = self.policy.select_radius_m
        for car in self.cars:
            d = math.hypot(car.x - point[0], car.y - point[1])
            if d <= best_d:
                best, best_d = car, d
        return best

    def select(self, car: Optional[Car]) -> None:
        car_id = car.id if car is not None else None
        if car_id != self.chosen_car_id:
            self.chosen_car_id = car_id
            self._chosen_changed = True
            log.debug("selected car: %s", car_id)

    def get(self, car_id: str) -> Optional[Car]:
        for car in self.cars:
            if car.id == car_id:
                return car
        return None

    @property
    def chosen_path(self) -> Optional[Path]:
        car = self.get(self.chosen_car_id) if self.chosen_car_id else None
        return car.path if car is not None else None

    def take_chosen_path_changed(self) -> bool:
        """Return and clear the chosen-path change flag."""
        changed = self._chosen_changed
        self._chosen_changed = False
        return changed

    # ── geometry replacement ──────────────────────────────────────────────

    def set_geometry(self, geometry: RoadGeometry, controls: TrafficControls) -> None:
        """Switch to a rebuilt network, dropping cars whose path no longer fits."""
        self.geometry = geometry
        self.controls = controls
        kept: List[Car] = []
        for car in self.cars:
            if car.path.is_valid_for(geometry):
                kept.append(car)
                continue
            car.state = CarState.IDLE
            log.error("%s: path references a segment that no longer exists; car removed", car.id)
            if car.id == self.chosen_car_id:
                self.select(None)
        self.cars = kept

    # ── tick ──────────────────────────────────────────────────────────────

    def update(self, dt: float) -> None:
        """Advance every car by *dt* seconds."""
        self._tick += 1
        snapshot = {car.id: self._path_position(car) for car in self.cars}
        for car in self.cars:
            self._step(car, dt, snapshot)

        finished = [car for car in self.cars if car.removed]
        if finished:
            self.cars = [car for car in self.cars if not car.removed]
            for car in finished:
                log.info("%s reached the end of its path; removed", car.id)
                if car.id == self.chosen_car_id:
                    self.select(None)

        if self.policy.debug_trace_every and self._tick % self.policy.debug_trace_every == 0:
            for car in self.cars:
                log.debug(
                    "tick=%d %s state=%s v=%.1f s=%.1f/%.1f dev=%.3f steer=%.3f",
                    self._tick, car.id, car.state.value, car.speed,
                    car.progress, car.path.length, car.deviation, car.steering,
                )

    def _path_position(self, car: Car) -> _PathPosition:
        index, offset = car.path.locate(car.progress)
        return _PathPosition(car.progress, index, car.path.segments[index], offset)

    def _step(self, car: Car, dt: float, snapshot: Dict[str, _PathPosition]) -> None:
        own = snapshot[car.id]
        cruise = cruise_speed_kmh(car.car_type, self.policy)
        reach = kmh_to_mps(max(car.speed, cruise)) * dt
        stop_at = self._stop_line(car, own, reach)

        if car.state.is_driving and stop_at is not None:
            car.resume_state = car.state
            car.state = CarState.STOPPED_AT_SIGNAL
            log.debug("%s stopping for signal, line at %.1f m", car.id, stop_at)
        elif car.state is CarState.STOPPED_AT_SIGNAL and stop_at is None:
            car.state = car.resume_state
            log.debug("%s signal cleared, resuming %s", car.id, car.state.value)

        target = self._target_speed(car, own, stop_at, snapshot)
        self._apply_speed(car, target, dt)

        advance = kmh_to_mps(car.speed) * dt
        if stop_at is not None:
            room = max(0.0, stop_at - car.progress)
            if advance >= room:
                advance = room
                car.speed = 0.0
        advance = min(advance, car.path.length - car.progress)
        car.progress += advance

        center, tangent = car.path.pose(self.geometry, car.progress)
        offset = lateral_offset((car.x, car.y), center, tangent)
        car.deviation = normalized_deviation(offset, self.geometry.half_width)
        car.steering = self.steering.correction(car.deviation)

        car.heading = wrap_angle(heading_of(tangent) - car.steering * self.policy.max_steer_rad)
        car.x += advance * math.cos(car.heading)
        car.y += advance * math.sin(car.heading)

        if car.progress >= car.path.length - 1e-9:
            car.state = CarState.IDLE

    def _stop_line(self, car: Car, own: _PathPosition, reach: float = 0.0) -> Optional[float]:
        """Progress at which *car* must halt for a gated connector ahead.

        Connectors are searched up to the signal look-ahead or *reach*
        metres past the car, whichever is further.
        """
        path = car.path
        horizon = max(self.policy.signal_look_ahead_m, reach + self.policy.stop_line_margin_m)
        for i in range(own.index + 1, len(path.segments)):
            begin = path.segment_start(i)
            if begin - own.progress > horizon:
                break
            if self.controls.is_gated(path.segments[i]):
                return begin - self.policy.stop_line_margin_m
        return None

    def _target_speed(
        self,
        car: Car,
        own: _PathPosition,
        stop_at: Optional[float],
        snapshot: Dict[str, _PathPosition],
    ) -> float:
        cruise = cruise_speed_kmh(car.car_type, self.policy)
        target = cruise
        if stop_at is not None:
            remaining = stop_at - own.progress
            if remaining <= 0.05:
                target = 0.0
            else:
                target = min(target, cruise * remaining / self.policy.stop_brake_zone_m)

        if self.policy.following_enabled:
            gap = self._gap_ahead(car, own, snapshot)
            if gap is not None and gap < self.policy.follow_gap_m:
                span = max(1e-6, self.policy.follow_gap_m - self.policy.min_gap_m)
                target = min(target, cruise * max(0.0, (gap - self.policy.min_gap_m) / span))
        return max(0.0, target)

    def _gap_ahead(
        self,
        car: Car,
        own: _PathPosition,
        snapshot: Dict[str, _PathPosition],
    ) -> Optional[float]:
        """Distance along *car*'s path to the nearest car ahead on it."""
        best: Optional[float] = None
        for other_id, other in snapshot.items():
            if other_id == car.id:
                continue
            j = car.path.index_of(other.key, own.index)
            if j is None:
                continue
            gap = car.path.segment_start(j) + other.offset - own.progress
            if gap <= 0.0:
                continue
            if best is None or gap < best:
                best = gap
        return best

    def _apply_speed(self, car: Car, target: float, dt: float) -> None:
        if car.speed > target:
            car.speed = max(target, car.speed - self.policy.max_brake_kmh_s * dt)
        elif car.speed < target:
            car.speed = min(target, car.speed + self.policy.max_accel_kmh_s * dt)

        # Anti-creep filter: snap very low speeds to zero
        if car.speed < self.policy.creep_filter_kmh and target < self.policy.creep_filter_kmh:
            car.speed = 0.0

    # ── presentation ──────────────────────────────────────────────────────

    def snapshot(self) -> List[Dict[str, object]]:
        return [car.as_dict() for car in self.cars]
