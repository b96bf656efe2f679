#!/usr/bin/env python3
"""
main.py
=======
Entry point: builds the road scenario, starts the simulation bridge on its
background thread and opens the pygame view (or logs status headlessly).

Environment overrides
---------------------
ROADSIM_TICK_RATE_HZ   simulation ticks per second
ROADSIM_SCENARIO       ``default`` or ``grid``
ROADSIM_GRID_ROWS      grid junction rows
ROADSIM_GRID_COLS      grid junction columns
ROADSIM_GRID_DROP      junctions removed from the grid
ROADSIM_SEED           seed for the grid's dropped junctions
ROADSIM_HEADLESS       ``1`` to run without a window
ROADSIM_LOG_LEVEL      ``DEBUG``, ``INFO``, ...
"""

import logging
import os
import time
from typing import Optional

import config
from logging_setup import setup_logging
from road.backbone import Backbone, default_backbone, grid_backbone
from sim.sim_bridge import SimBridge

log = logging.getLogger("main")


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning("Ignoring %s=%r (not an integer)", name, raw)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        log.warning("Ignoring %s=%r (not a number)", name, raw)
        return default


def build_backbone(
    scenario: str,
    rows: int = config.DEFAULT_GRID_ROWS,
    cols: int = config.DEFAULT_GRID_COLS,
    drop: int = config.DEFAULT_GRID_DROP,
    seed: Optional[int] = config.DEFAULT_SEED,
) -> Backbone:
    """Road layout for *scenario* (``default`` or ``grid``)."""
    if scenario == "grid":
        return grid_backbone(rows, cols, config.DEFAULT_GRID_SPACING_M, drop=drop, seed=seed)
    if scenario != "default":
        log.warning("Unknown scenario %r, using the default layout", scenario)
    return default_backbone()


def run_headless(bridge: SimBridge) -> None:
    """Tick in the background and log a status line until interrupted."""
    bridge.start()
    try:
        while True:
            time.sleep(config.HEADLESS_STATUS_EVERY_S)
            status = bridge.get_status()
            log.info(
                "tick=%s vehicles=%s bus=%s",
                status.get("tick"), status.get("vehicle_count"), status.get("bus_metrics"),
            )
    except KeyboardInterrupt:
        log.info("Shutting down...")
    finally:
        bridge.stop()


def main() -> None:
    level_name = os.environ.get("ROADSIM_LOG_LEVEL", "INFO").upper()
    setup_logging(getattr(logging, level_name, logging.INFO))

    scenario = os.environ.get("ROADSIM_SCENARIO", config.DEFAULT_SCENARIO).strip().lower()
    backbone = build_backbone(
        scenario,
        rows=_env_int("ROADSIM_GRID_ROWS", config.DEFAULT_GRID_ROWS),
        cols=_env_int("ROADSIM_GRID_COLS", config.DEFAULT_GRID_COLS),
        drop=_env_int("ROADSIM_GRID_DROP", config.DEFAULT_GRID_DROP),
        seed=_env_int("ROADSIM_SEED", config.DEFAULT_SEED),
    )
    bridge = SimBridge(
        tick_rate_hz=_env_float("ROADSIM_TICK_RATE_HZ", config.DEFAULT_TICK_RATE_HZ),
        backbone=backbone,
    )
    log.info("Starting %s scenario", scenario)

    if os.environ.get("ROADSIM_HEADLESS", "0") == "1":
        run_headless(bridge)
        return

    # Imported late so headless runs never initialise pygame.
    from ui.pygame_view import run_pygame_view

    bridge.start()
    try:
        run_pygame_view(
            bridge,
            width=config.WINDOW_WIDTH,
            height=config.WINDOW_HEIGHT,
            fps=config.TARGET_FPS,
        )
    finally:
        bridge.stop()


if __name__ == "__main__":
    main()
