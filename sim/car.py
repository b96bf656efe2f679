#!/usr/bin/env python3
"""
sim/car.py
==========
Vehicle record and the small enums that drive its behaviour.

A :class:`Car` is plain data: the :class:`~sim.car_system.CarSystem`
reads and writes it once per tick, and the presentation layer only ever
sees :meth:`Car.as_dict` snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from road.planner import Path


class CarType(str, Enum):
    NORMAL = "NORMAL"
    SLOW = "SLOW"


class CarState(str, Enum):
    """Behavioural state; ``IDLE`` doubles as the removed terminal state."""

    IDLE = "IDLE"
    GO_NORMAL = "GO_NORMAL"
    SLOW = "SLOW"
    STOPPED_AT_SIGNAL = "STOPPED_AT_SIGNAL"

    @property
    def is_driving(self) -> bool:
        return self in (CarState.GO_NORMAL, CarState.SLOW)


def driving_state(car_type: CarType) -> CarState:
    """Free-driving state a car of *car_type* starts in."""
    if car_type is CarType.SLOW:
        return CarState.SLOW
    return CarState.GO_NORMAL


class AddMode(str, Enum):
    IDLE = "IDLE"
    AWAITING_FIRST_POINT = "AWAITING_FIRST_POINT"
    AWAITING_SECOND_POINT = "AWAITING_SECOND_POINT"


@dataclass(frozen=True)
class AddState:
    """Progress of the two-click placement gesture."""

    mode: AddMode = AddMode.IDLE
    car_type: CarType = CarType.NORMAL
    first_point: Optional[Tuple[float, float]] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "car_type": self.car_type.value,
            "first_point": self.first_point,
        }


@dataclass
class Car:
    """A vehicle following a planned path.

    Attributes
    ----------
    id : str
        Unique identifier (e.g. ``CAR_000``).
    car_type : CarType
        NORMAL or SLOW; decides the cruise speed.
    path : Path
        Route being followed.
    x, y : float
        World-space position (m).
    heading : float
        Travel direction (rad, CCW from +x).
    speed : float
        Current speed in km/h.
    progress : float
        Distance travelled along :attr:`path` (m).
    state : CarState
        Current behavioural state.
    resume_state : CarState
        Driving state to return to once a signal clears.
    deviation : float
        Last normalised lateral deviation (0 = left border, 1 = right).
    steering : float
        Last steering correction (positive = right).
    """

    id: str
    car_type: CarType
    path: Path
    x: float
    y: float
    heading: float
    speed: float = 0.0
    progress: float = 0.0
    state: CarState = CarState.IDLE
    resume_state: CarState = CarState.IDLE
    deviation: float = 0.5
    steering: float = 0.0

    @property
    def removed(self) -> bool:
        return self.state is CarState.IDLE

    @property
    def remaining_m(self) -> float:
        return max(0.0, self.path.length - self.progress)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "x": round(self.x, 3),
            "y": round(self.y, 3),
            "heading": round(self.heading, 4),
            "speed": round(self.speed, 2),
            "car_type": self.car_type.value,
            "state": self.state.value,
            "deviation": round(self.deviation, 4),
            "steering": round(self.steering, 4),
            "progress": round(self.progress, 2),
            "remaining": round(self.remaining_m, 2),
        }
