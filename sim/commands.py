#!/usr/bin/env python3
"""
sim/commands.py
===============
External commands accepted by the simulation between steps.

Commands are immutable values.  The UI thread serialises them to plain
dict payloads for the bus with :func:`command_to_payload`; the control
loop turns payloads back into commands with :func:`command_from_payload`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Union

from sim.car import CarType


@dataclass(frozen=True)
class Click:
    """A click at a world position."""

    x: float
    y: float


@dataclass(frozen=True)
class StartAdding:
    """Set the type of the next placed car and wait for its two points."""

    car_type: CarType = CarType.NORMAL


@dataclass(frozen=True)
class Cancel:
    """Abandon an in-progress placement."""


Command = Union[Click, StartAdding, Cancel]


def command_to_payload(command: Command) -> Dict[str, Any]:
    if isinstance(command, Click):
        return {"type": "click", "x": float(command.x), "y": float(command.y)}
    if isinstance(command, StartAdding):
        return {"type": "start_adding", "car_type": command.car_type.value}
    if isinstance(command, Cancel):
        return {"type": "cancel"}
    raise TypeError(f"not a command: {command!r}")


def command_from_payload(payload: Dict[str, Any]) -> Command:
    """Parse a bus payload; raises ``ValueError`` for anything malformed."""
    kind = payload.get("type")
    try:
        if kind == "click":
            return Click(x=float(payload["x"]), y=float(payload["y"]))
        if kind == "start_adding":
            return StartAdding(car_type=CarType(str(payload.get("car_type", "NORMAL")).upper()))
        if kind == "cancel":
            return Cancel()
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"malformed {kind!r} command: {payload!r}") from exc
    raise ValueError(f"unknown command type {kind!r}")
