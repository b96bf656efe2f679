#!/usr/bin/env python3
"""
sim/traffic_policy.py
=====================
Tunable geometry, driving and signal parameters for the road simulation.
Every constant lives in the frozen :class:`DrivingPolicy` dataclass so that
experiments can swap policies without touching code.

Also provides :func:`cruise_speed_kmh`, the free-driving speed for a car type.
"""

from __future__ import annotations

from dataclasses import dataclass

from sim.car import CarType


@dataclass(frozen=True)
class DrivingPolicy:
    """Immutable bag of every tunable simulation parameter.

    Groups: geometry, longitudinal control, steering, signals,
    following, input resolution, semaphore.
    """

    # ── Geometry ──────────────────────────────────────────────────────────
    lane_half_width_m: float = 1.75
    """Distance from a lane centreline to each of its borders."""

    bezier_subdivisions: int = 16
    """Linear steps per Bezier when tessellating borders for rendering."""

    arc_length_samples: int = 32
    """Linear steps per Bezier in the centreline arc-length table."""

    # ── Longitudinal control ──────────────────────────────────────────────
    normal_cruise_kmh: float = 36.0
    """Free-driving speed of a NORMAL car."""

    slow_cruise_kmh: float = 18.0
    """Free-driving speed of a SLOW car."""

    max_accel_kmh_s: float = 30.0
    """Maximum acceleration rate (km/h per s)."""

    max_brake_kmh_s: float = 60.0
    """Maximum braking rate (km/h per s)."""

    creep_filter_kmh: float = 0.5
    """Speeds below this threshold are snapped to zero when the target is too."""

    # ── Steering ──────────────────────────────────────────────────────────
    max_steer_rad: float = 0.5
    """Heading offset from the path tangent at a steering correction of ±1."""

    # ── Signals ───────────────────────────────────────────────────────────
    signal_look_ahead_m: float = 15.0
    """A gated connector closer than this puts the car into StoppedAtSignal."""

    stop_line_margin_m: float = 1.0
    """Cars stop this far before the entry of a gated connector."""

    stop_brake_zone_m: float = 12.0
    """Target speed ramps down linearly over this distance before the stop line."""

    # ── Following ─────────────────────────────────────────────────────────
    following_enabled: bool = True
    """Hold back behind cars ahead on the same path."""

    follow_gap_m: float = 10.0
    """Gap at which a follower starts to slow down."""

    min_gap_m: float = 4.0
    """Gap at which a follower's target speed reaches zero."""

    # ── Input resolution ──────────────────────────────────────────────────
    snap_radius_m: float = 5.0
    """Clicks farther than this from any centreline do not resolve to a road."""

    select_radius_m: float = 4.0
    """Clicks farther than this from every car select nothing."""

    planner_max_expansions: int = 10_000
    """Segments the path search may settle before giving up."""

    # ── Semaphore (traffic light) ─────────────────────────────────────────
    semaphore_enabled: bool = True
    """Cycle streetlights automatically; when off they stay green unless held."""

    semaphore_green_s: float = 8.0
    """Duration of the green phase per approach group (seconds)."""

    semaphore_yellow_s: float = 2.0
    """Duration of the yellow phase (seconds)."""

    semaphore_red_clearance_s: float = 1.0
    """All-red clearance interval between phases (seconds)."""

    # ── Diagnostics ───────────────────────────────────────────────────────
    debug_trace_every: int = 20
    """Emit a per-car DEBUG trace every N ticks."""


def cruise_speed_kmh(car_type: CarType, policy: DrivingPolicy) -> float:
    """Free-driving speed for *car_type*."""
    if car_type is CarType.SLOW:
        return policy.slow_cruise_kmh
    return policy.normal_cruise_kmh
