"""
sim/sim_bridge.py
=================
Background-thread orchestrator tying :mod:`sim.world` and the
:class:`bus.command_bus.CommandBus` together.  The UI publishes commands
through the bridge and polls it for the latest snapshot without blocking.

Public API consumed by :mod:`ui.pygame_view`
--------------------------------------------
* ``send(command)``           → ``None``
* ``get_vehicles()``          → ``List[dict]``
* ``get_lights()``            → ``List[dict]``
* ``get_add_state()``         → ``dict``
* ``get_mesh()``              → ``(version, dict)``
* ``get_status()``            → ``dict``
* ``reset()``                 → ``None``
* ``set_paused(bool)``        → ``None``
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bus.command_bus import UI_COMMAND_TOPIC, CommandBus
from road.backbone import Backbone
from sim.commands import Command, command_from_payload, command_to_payload
from sim.traffic_policy import DrivingPolicy
from sim.world import World

log = logging.getLogger("sim_bridge")

# Vehicle palette, handed out round-robin in placement order
_VEHICLE_COLORS: Sequence[Tuple[int, int, int]] = (
    (86, 168, 255),
    (255, 88, 88),
    (100, 226, 170),
    (246, 191, 90),
    (180, 120, 255),
    (255, 160, 100),
)


class SimBridge:
    """Simulation orchestrator running in a background thread.

    The thread calls :meth:`tick` at ``tick_rate_hz``: it drains the
    ``ui.command`` topic, advances the :class:`~sim.world.World` one step
    and swaps fresh snapshots in for the UI thread.

    Parameters
    ----------
    tick_rate_hz : float
        Simulation ticks per second.
    backbone : Backbone or None
        Road layout; the default scenario when *None*.
    policy : DrivingPolicy or None
        Tunable constants.
    bus : CommandBus or None
        Shared command bus; a private one when *None*.
    """

    def __init__(
        self,
        tick_rate_hz: float = 20.0,
        backbone: Optional[Backbone] = None,
        policy: Optional[DrivingPolicy] = None,
        bus: Optional[CommandBus] = None,
    ) -> None:
        self._tick_rate_hz = tick_rate_hz
        self._backbone = backbone
        self._policy = policy
        self._world = World(backbone=backbone, policy=policy)
        self._bus = bus or CommandBus()

        self._lock = threading.Lock()

        # Cached state — written by sim thread, read by UI thread
        self._vehicles: List[Dict[str, Any]] = []
        self._lights: List[Dict[str, Any]] = []
        self._add_state: Dict[str, Any] = {}
        self._status: Dict[str, Any] = {}
        self._mesh: Dict[str, Any] = {}
        self._mesh_version = 0
        self._color_by_id: Dict[str, Tuple[int, int, int]] = {}
        self._colors_assigned = 0

        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._paused = False
        self._reset_requested = False

        self._publish_snapshot()

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Spawn the background simulation thread."""
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(
            target=self._loop, daemon=True, name="SimBridge"
        )
        self._thread.start()
        log.info("SimBridge started at %.1f Hz", self._tick_rate_hz)

    def stop(self) -> None:
        """Signal the thread to stop and wait for it to join."""
        self._running = False
        if self._thread:
            self._thread.join(timeout=2.0)
        log.info("SimBridge stopped")

    # ── UI-facing API ─────────────────────────────────────────────────────────

    @property
    def world(self) -> World:
        return self._world

    @property
    def tick_rate_hz(self) -> float:
        return self._tick_rate_hz

    def send(self, command: Command) -> None:
        """Queue *command* for the next tick."""
        self._bus.publish(UI_COMMAND_TOPIC, sender="ui", payload=command_to_payload(command))

    def get_vehicles(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._vehicles)

    def get_lights(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._lights)

    def get_add_state(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._add_state)

    def get_status(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._status)

    def get_mesh(self) -> Tuple[int, Dict[str, Any]]:
        """Latest mesh arrays and a version that changes whenever they do."""
        with self._lock:
            return self._mesh_version, dict(self._mesh)

    def reset(self) -> None:
        """Rebuild the world before the next tick so the scenario restarts."""
        self._reset_requested = True

    def set_paused(self, paused: bool) -> None:
        """Pause / unpause the simulation tick."""
        self._paused = paused

    # ── Background loop ───────────────────────────────────────────────────────

    def _loop(self) -> None:
        dt = 1.0 / self._tick_rate_hz
        while self._running:
            t0 = time.perf_counter()
            try:
                self.tick(dt, advance=not self._paused)
            except Exception:
                log.exception("SimBridge tick error")
            time.sleep(max(0.0, dt - (time.perf_counter() - t0)))

    # ── tick ──────────────────────────────────────────────────────────────────

    def tick(self, dt: float, advance: bool = True) -> None:
        """Apply queued commands, step the world once and publish snapshots."""
        if self._reset_requested:
            self._reset_requested = False
            self._world = World(backbone=self._backbone, policy=self._policy)
            self._color_by_id = {}
            self._colors_assigned = 0
            log.info("SimBridge reset")

        self._drain_commands()
        if advance:
            self._world.update_physics(dt)
        self._publish_snapshot()

    def _drain_commands(self) -> None:
        for msg in self._bus.poll(UI_COMMAND_TOPIC):
            try:
                command = command_from_payload(msg.payload)
            except ValueError as exc:
                self._bus.reject(msg, str(exc))
                continue
            self._world.handle(command)

    def _color_for_car(self, car_id: str) -> Tuple[int, int, int]:
        existing = self._color_by_id.get(car_id)
        if existing:
            return existing
        color = _VEHICLE_COLORS[self._colors_assigned % len(_VEHICLE_COLORS)]
        self._colors_assigned += 1
        self._color_by_id[car_id] = color
        return color

    def _publish_snapshot(self) -> None:
        snap = self._world.snapshot()
        vehicles = []
        for vehicle in snap["vehicles"]:
            vehicle["color"] = self._color_for_car(vehicle["id"])
            vehicle["selected"] = vehicle["id"] == snap["chosen"]
            vehicles.append(vehicle)
        live = {vehicle["id"] for vehicle in vehicles}
        self._color_by_id = {k: c for k, c in self._color_by_id.items() if k in live}

        status = {
            "tick": snap["tick"],
            "vehicle_count": len(vehicles),
            "chosen": snap["chosen"],
            "paused": self._paused,
            "bus_metrics": self._bus.metrics.report(),
        }

        mesh = self._world.mesh
        mesh_data = None
        if mesh.changed:
            mesh_data = {
                "vertices": mesh.vertices.copy(),
                "triangles": mesh.triangles.copy(),
                "borders": mesh.borders.copy(),
                "chosen": mesh.chosen.copy(),
            }
            mesh.mark_uploaded()

        # Atomic swap — UI thread reads these via public methods.
        with self._lock:
            self._vehicles = vehicles
            self._lights = snap["lights"]
            self._add_state = snap["add_state"]
            self._status = status
            if mesh_data is not None:
                self._mesh = mesh_data
                self._mesh_version += 1
