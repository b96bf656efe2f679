#!/usr/bin/env python3
"""
config.py
=========
Application-wide configuration constants.

Values can be overridden via environment variables (see :mod:`main`).
This module is a thin, import-safe leaf — it never imports from
other project packages.  Driving behaviour lives in
:class:`sim.traffic_policy.DrivingPolicy`.
"""

# ── Simulation defaults ──────────────────────────────────────────────────────
DEFAULT_TICK_RATE_HZ: float = 20.0
DEFAULT_SCENARIO: str = "default"  # "default" | "grid"
SCENARIOS = ("default", "grid")

# ── Procedural grid defaults ─────────────────────────────────────────────────
DEFAULT_GRID_ROWS: int = 2
DEFAULT_GRID_COLS: int = 3
DEFAULT_GRID_SPACING_M: float = 80.0
DEFAULT_GRID_DROP: int = 0
DEFAULT_SEED = None

# ── UI defaults ──────────────────────────────────────────────────────────────
WINDOW_WIDTH: int = 1000
WINDOW_HEIGHT: int = 700
TARGET_FPS: int = 60

# ── Headless run ─────────────────────────────────────────────────────────────
HEADLESS_STATUS_EVERY_S: float = 1.0
