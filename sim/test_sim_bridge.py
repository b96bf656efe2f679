#!/usr/bin/env python3
"""
Tests for command draining and snapshot publishing in the bridge.
"""

from __future__ import annotations

import time
import unittest

from bus.command_bus import UI_COMMAND_TOPIC, CommandBus
from road.backbone import Backbone
from sim.car import CarType
from sim.commands import Click, StartAdding
from sim.sim_bridge import SimBridge
from sim.traffic_policy import DrivingPolicy


def _straight() -> Backbone:
    bb = Backbone()
    w, e = bb.add_location("W"), bb.add_location("E")
    bb.add_road(w, e, [bb.add_point((0.0, 0.0), (1.0, 0.0)), bb.add_point((300.0, 0.0), (1.0, 0.0))])
    return bb


class SimBridgeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.bus = CommandBus()
        self.bridge = SimBridge(
            tick_rate_hz=50.0,
            backbone=_straight(),
            policy=DrivingPolicy(semaphore_enabled=False),
            bus=self.bus,
        )

    def test_commands_apply_on_next_tick(self) -> None:
        self.bridge.send(StartAdding(CarType.SLOW))
        self.bridge.send(Click(10.0, 0.5))
        self.bridge.send(Click(250.0, 0.0))
        self.assertEqual(self.bridge.get_vehicles(), [])
        self.assertEqual(self.bus.pending(UI_COMMAND_TOPIC), 3)

        self.bridge.tick(0.05)
        vehicles = self.bridge.get_vehicles()
        self.assertEqual(len(vehicles), 1)
        self.assertEqual(vehicles[0]["car_type"], "SLOW")
        self.assertEqual(vehicles[0]["state"], "SLOW")
        self.assertEqual(self.bus.pending(UI_COMMAND_TOPIC), 0)
        self.assertEqual(self.bridge.get_add_state()["mode"], "IDLE")

    def test_add_state_is_published_between_clicks(self) -> None:
        self.bridge.send(StartAdding())
        self.bridge.send(Click(10.0, 0.0))
        self.bridge.tick(0.05)
        state = self.bridge.get_add_state()
        self.assertEqual(state["mode"], "AWAITING_SECOND_POINT")
        self.assertEqual(state["first_point"], (10.0, 0.0))

    def test_malformed_payload_is_skipped(self) -> None:
        self.bus.publish(UI_COMMAND_TOPIC, sender="test", payload={"type": "warp"})
        self.bus.publish(UI_COMMAND_TOPIC, sender="test", payload={"type": "click"})
        with self.assertLogs("bus", level="WARNING"):
            self.bridge.tick(0.05)
        self.assertEqual(self.bus.metrics.rejected, 2)
        self.assertEqual(self.bridge.get_status()["tick"], 1)

    def test_mesh_version_changes_only_with_mesh(self) -> None:
        version, mesh = self.bridge.get_mesh()
        self.assertEqual(version, 1)
        self.assertGreater(len(mesh["triangles"]), 0)
        self.assertEqual(len(mesh["chosen"]), 0)

        self.bridge.tick(0.05)
        self.assertEqual(self.bridge.get_mesh()[0], 1)

        car = self.bridge.world.cars.place((10.0, 0.0), (250.0, 0.0))
        self.bridge.send(Click(car.x, car.y))
        self.bridge.tick(0.05)
        version, mesh = self.bridge.get_mesh()
        self.assertEqual(version, 2)
        self.assertGreater(len(mesh["chosen"]), 0)
        self.assertTrue(self.bridge.get_vehicles()[0]["selected"])

    def test_paused_tick_still_drains_commands(self) -> None:
        self.bridge.send(StartAdding())
        self.bridge.tick(0.05, advance=False)
        self.assertEqual(self.bridge.get_status()["tick"], 0)
        self.assertEqual(self.bridge.get_add_state()["mode"], "AWAITING_FIRST_POINT")

    def test_reset_rebuilds_world(self) -> None:
        self.bridge.world.cars.place((10.0, 0.0), (250.0, 0.0))
        self.bridge.tick(0.05)
        self.bridge.reset()
        self.bridge.tick(0.05)
        self.assertEqual(self.bridge.get_vehicles(), [])
        self.assertEqual(self.bridge.get_status()["tick"], 1)

    def test_background_thread_advances(self) -> None:
        self.bridge.start()
        try:
            time.sleep(0.3)
        finally:
            self.bridge.stop()
        self.assertGreater(self.bridge.get_status()["tick"], 0)


if __name__ == "__main__":
    unittest.main()
