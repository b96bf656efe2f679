#!/usr/bin/env python3
"""
Tests for streetlight cycling and cross-section gating.
"""

from __future__ import annotations

import unittest

from road.backbone import default_backbone
from road.geometry import RoadGeometry, SegmentKey
from sim.signals import LightColor, TrafficControls, TrafficLight
from sim.traffic_policy import DrivingPolicy


class TrafficLightTests(unittest.TestCase):
    def setUp(self) -> None:
        self.policy = DrivingPolicy(
            semaphore_green_s=8.0, semaphore_yellow_s=2.0, semaphore_red_clearance_s=1.0,
        )
        self.light = TrafficLight(
            location_id=9, name="J", phases=[(1,), (2,)], position=(0.0, 0.0), policy=self.policy,
        )

    def test_full_cycle(self) -> None:
        self.assertEqual(self.light.color_for(1), LightColor.GREEN)
        self.assertEqual(self.light.color_for(2), LightColor.RED)

        self.light.update(8.0)
        self.assertEqual(self.light.color_for(1), LightColor.YELLOW)
        self.assertEqual(self.light.color_for(2), LightColor.RED)

        self.light.update(2.0)
        self.assertEqual(self.light.color_for(1), LightColor.RED)
        self.assertEqual(self.light.color_for(2), LightColor.RED)

        self.light.update(1.0)
        self.assertEqual(self.light.color_for(1), LightColor.RED)
        self.assertEqual(self.light.color_for(2), LightColor.GREEN)

    def test_hold_shows_red_and_freezes_timer(self) -> None:
        self.light.hold()
        self.assertEqual(self.light.color_for(1), LightColor.RED)
        self.light.update(20.0)
        self.assertEqual(self.light.timer, 8.0)
        self.light.release()
        self.assertEqual(self.light.color_for(1), LightColor.GREEN)

    def test_disabled_semaphore_stays_green(self) -> None:
        light = TrafficLight(
            location_id=9, name="J", phases=[(1,), (2,)], position=(0.0, 0.0),
            policy=DrivingPolicy(semaphore_enabled=False),
        )
        light.update(100.0)
        self.assertEqual(light.color_for(1), LightColor.GREEN)
        self.assertEqual(light.color_for(2), LightColor.GREEN)
        light.hold()
        self.assertEqual(light.color_for(2), LightColor.RED)

    def test_unknown_approach_is_red(self) -> None:
        self.assertEqual(self.light.color_for(77), LightColor.RED)


class TrafficControlsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.bb = default_backbone()
        self.geom = RoadGeometry(self.bb)
        self.controls = TrafficControls(self.bb, self.geom, DrivingPolicy())
        self.a, self.b, self.c, self.d = (self.bb.location(n) for n in "ABCD")

    def test_one_phase_per_approach_by_default(self) -> None:
        light = self.controls.light_at(self.b)
        self.assertEqual(light.phases, [(self.a,), (self.d,)])

    def test_gating_follows_the_approach(self) -> None:
        self.assertFalse(self.controls.is_gated(SegmentKey(self.a, self.c, self.b)))
        self.assertFalse(self.controls.is_gated(SegmentKey(self.a, self.d, self.b)))
        self.assertTrue(self.controls.is_gated(SegmentKey(self.d, self.c, self.b)))
        self.assertFalse(self.controls.is_gated(SegmentKey(self.a, self.b)))

        self.controls.hold(self.b)
        self.assertTrue(self.controls.is_gated(SegmentKey(self.a, self.c, self.b)))
        self.controls.release(self.b)
        self.assertFalse(self.controls.is_gated(SegmentKey(self.a, self.c, self.b)))

    def test_yellow_gates_too(self) -> None:
        self.controls.update(DrivingPolicy().semaphore_green_s)
        self.assertEqual(self.controls.light_at(self.b).color, LightColor.YELLOW)
        self.assertTrue(self.controls.is_gated(SegmentKey(self.a, self.c, self.b)))

    def test_snapshot_lists_every_light(self) -> None:
        snap = self.controls.snapshot()
        self.assertEqual(len(snap), 1)
        self.assertEqual(snap[0]["location"], "B")
        self.assertEqual(snap[0]["color"], "GREEN")


if __name__ == "__main__":
    unittest.main()
