#!/usr/bin/env python3
"""
Behaviour tests for lane keeping, signal stops, placement commands and
car removal.
"""

from __future__ import annotations

import math
import unittest

from road.backbone import Backbone
from sim.car import AddMode, AddState, CarState, CarType
from sim.commands import Cancel, Click, StartAdding
from sim.traffic_policy import DrivingPolicy
from sim.world import World


def _straight_backbone(length: float = 400.0) -> Backbone:
    bb = Backbone()
    w, e = bb.add_location("W"), bb.add_location("E")
    bb.add_road(w, e, [bb.add_point((0.0, 0.0), (1.0, 0.0)), bb.add_point((length, 0.0), (1.0, 0.0))])
    return bb


def _junction_backbone(with_connector: bool = True, with_light: bool = True) -> Backbone:
    """A→B straight east, then a left-hand connector at B up to C."""
    bb = Backbone()
    a, b, c = bb.add_location("A"), bb.add_location("B"), bb.add_location("C")
    pa = bb.add_point((0.0, 0.0), (1.0, 0.0))
    pb = bb.add_point((50.0, 0.0), (1.0, 0.0))
    pc = bb.add_point((60.0, 10.0), (0.0, 1.0))
    pd = bb.add_point((60.0, 60.0), (0.0, 1.0))
    bb.add_road(a, b, [pa, pb])
    bb.add_road(b, c, [pc, pd])
    if with_connector:
        bb.add_cross_section(a, b, c, [pb, pc])
    if with_light:
        bb.add_streetlight(b)
    return bb


_QUIET = DrivingPolicy(following_enabled=False, semaphore_enabled=False)


class LaneKeepingTests(unittest.TestCase):
    def test_off_centre_car_converges_monotonically(self) -> None:
        world = World(_straight_backbone(), policy=_QUIET)
        car = world.cars.place((5.0, 1.0), (390.0, 0.0))
        self.assertIsNotNone(car)
        self.assertEqual((car.x, car.y), (5.0, 1.0))

        errors = []
        for _ in range(300):
            world.update_physics(0.05)
            errors.append(abs(car.deviation - 0.5))

        self.assertLess(errors[0], 0.5)
        for prev, cur in zip(errors, errors[1:]):
            self.assertLessEqual(cur, prev + 1e-9)
        self.assertLess(errors[-1], 0.01)
        self.assertLess(abs(car.y), 0.05)

    def test_car_right_of_centre_steers_left(self) -> None:
        world = World(_straight_backbone(), policy=_QUIET)
        car = world.cars.place((5.0, -1.2), (390.0, 0.0))
        for _ in range(40):
            world.update_physics(0.05)
        self.assertGreater(car.y, -1.2)
        self.assertLessEqual(car.steering, 0.0)

    def test_cruise_speed_depends_on_type(self) -> None:
        world = World(_straight_backbone(), policy=_QUIET)
        normal = world.cars.place((5.0, 0.0), (390.0, 0.0), CarType.NORMAL)
        slow = world.cars.place((5.0, 0.0), (390.0, 0.0), CarType.SLOW)
        for _ in range(60):
            world.update_physics(0.05)
        self.assertEqual(normal.state, CarState.GO_NORMAL)
        self.assertEqual(slow.state, CarState.SLOW)
        self.assertAlmostEqual(normal.speed, _QUIET.normal_cruise_kmh)
        self.assertAlmostEqual(slow.speed, _QUIET.slow_cruise_kmh)


class SignalStopTests(unittest.TestCase):
    def setUp(self) -> None:
        self.world = World(_junction_backbone(), policy=_QUIET)
        self.b = self.world.backbone.location("B")
        self.car = self.world.cars.place((1.0, 0.0), (60.0, 55.0))
        self.assertEqual(len(self.car.path.segments), 3)
        self.stop_line = self.car.path.segment_start(1) - _QUIET.stop_line_margin_m

    def test_stops_before_held_light_and_resumes(self) -> None:
        self.world.controls.hold(self.b)
        self.world.update_physics(0.05)
        # Still beyond the look-ahead distance
        self.assertEqual(self.car.state, CarState.GO_NORMAL)

        saw_stop = False
        for _ in range(400):
            self.world.update_physics(0.05)
            self.assertLessEqual(self.car.progress, self.stop_line + 1e-9)
            saw_stop = saw_stop or self.car.state is CarState.STOPPED_AT_SIGNAL
        self.assertTrue(saw_stop)
        self.assertEqual(self.car.state, CarState.STOPPED_AT_SIGNAL)
        self.assertEqual(self.car.speed, 0.0)
        self.assertGreater(self.car.progress, self.stop_line - 1.0)

        self.world.controls.release(self.b)
        self.world.update_physics(0.05)
        self.assertEqual(self.car.state, CarState.GO_NORMAL)
        for _ in range(100):
            self.world.update_physics(0.05)
        self.assertGreater(self.car.progress, self.car.path.segment_start(1))

    def test_long_tick_does_not_jump_held_light(self) -> None:
        self.car.progress = self.stop_line - 28.0
        self.car.x = 1.0 + self.car.progress
        self.car.speed = _QUIET.normal_cruise_kmh
        self.world.controls.hold(self.b)
        for _ in range(2):
            self.world.update_physics(3.0)
            self.assertLessEqual(self.car.progress, self.stop_line + 1e-9)
            self.assertEqual(self.car.state, CarState.STOPPED_AT_SIGNAL)
            self.assertEqual(self.car.speed, 0.0)
        self.assertAlmostEqual(self.car.progress, self.stop_line)
        self.assertLess(self.car.x, 50.0)

    def test_slow_car_resumes_slow(self) -> None:
        slow = self.world.cars.place((1.0, 0.0), (60.0, 55.0), CarType.SLOW)
        self.world.cars.cars.remove(self.car)
        self.world.controls.hold(self.b)
        for _ in range(600):
            self.world.update_physics(0.05)
        self.assertEqual(slow.state, CarState.STOPPED_AT_SIGNAL)
        self.assertEqual(slow.resume_state, CarState.SLOW)
        self.world.controls.release(self.b)
        self.world.update_physics(0.05)
        self.assertEqual(slow.state, CarState.SLOW)

    def test_green_light_does_not_stop(self) -> None:
        for _ in range(300):
            self.world.update_physics(0.05)
            self.assertNotEqual(self.car.state, CarState.STOPPED_AT_SIGNAL)


class RemovalTests(unittest.TestCase):
    def test_car_is_removed_at_end_of_path(self) -> None:
        world = World(_straight_backbone(), policy=_QUIET)
        car = world.cars.place((1.0, 0.0), (20.0, 0.0))
        world.cars.select(car)
        world.cars.take_chosen_path_changed()
        for _ in range(200):
            world.update_physics(0.05)
            if not world.cars.cars:
                break
        self.assertEqual(world.cars.cars, [])
        self.assertEqual(car.state, CarState.IDLE)
        self.assertIsNone(world.cars.chosen_car_id)
        self.assertEqual(len(world.mesh.chosen), 0)

    def test_invalidated_path_removes_car(self) -> None:
        world = World(_junction_backbone(), policy=_QUIET)
        turning = world.cars.place((1.0, 0.0), (60.0, 55.0))
        straight = world.cars.place((1.0, 0.0), (40.0, 0.0))
        with self.assertLogs("car_system", level="ERROR"):
            world.set_backbone(_junction_backbone(with_connector=False))
        self.assertEqual([c.id for c in world.cars.cars], [straight.id])
        self.assertEqual(turning.state, CarState.IDLE)
        world.update_physics(0.05)


class AddModeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.world = World(_straight_backbone(), policy=_QUIET)

    def test_two_click_placement(self) -> None:
        self.world.handle(StartAdding(CarType.SLOW))
        self.assertEqual(self.world.cars.add_state.mode, AddMode.AWAITING_FIRST_POINT)
        self.world.handle(Click(10.0, 1.0))
        state = self.world.cars.add_state
        self.assertEqual(state.mode, AddMode.AWAITING_SECOND_POINT)
        self.assertEqual(state.first_point, (10.0, 1.0))

        car = self.world.handle(Click(200.0, 0.0))
        self.assertIsNotNone(car)
        self.assertEqual((car.x, car.y), (10.0, 1.0))
        self.assertEqual(car.car_type, CarType.SLOW)
        self.assertEqual(car.state, CarState.SLOW)
        self.assertEqual(self.world.cars.add_state, AddState())

    def test_unreachable_placement_is_discarded(self) -> None:
        self.world.handle(StartAdding())
        self.world.handle(Click(10.0, 0.0))
        with self.assertLogs("car_system", level="WARNING"):
            car = self.world.handle(Click(200.0, 50.0))
        self.assertIsNone(car)
        self.assertEqual(self.world.cars.cars, [])
        self.assertEqual(self.world.cars.add_state.mode, AddMode.IDLE)

    def test_cancel_resets_add_mode(self) -> None:
        self.world.handle(StartAdding(CarType.SLOW))
        self.world.handle(Click(10.0, 0.0))
        self.world.handle(Cancel())
        self.assertEqual(self.world.cars.add_state, AddState())
        self.world.handle(Click(200.0, 0.0))
        self.assertEqual(self.world.cars.cars, [])

    def test_idle_click_selects_nearest_car(self) -> None:
        car = self.world.cars.place((10.0, 0.0), (300.0, 0.0))
        self.world.mesh.mark_uploaded()
        self.world.handle(Click(11.0, 0.5))
        self.assertEqual(self.world.cars.chosen_car_id, car.id)
        self.assertIs(self.world.cars.chosen_path, car.path)
        self.assertTrue(self.world.mesh.changed)
        self.assertGreater(len(self.world.mesh.chosen), 0)

        self.world.handle(Click(300.0, 300.0))
        self.assertIsNone(self.world.cars.chosen_car_id)
        self.assertEqual(len(self.world.mesh.chosen), 0)


class FollowingTests(unittest.TestCase):
    def _run(self, lead_first: bool):
        world = World(_straight_backbone(), policy=DrivingPolicy(semaphore_enabled=False))
        places = [((20.0, 0.0), CarType.SLOW), ((5.0, 0.0), CarType.NORMAL)]
        if not lead_first:
            places.reverse()
        for start, car_type in places:
            world.cars.place(start, (390.0, 0.0), car_type)
        gaps = []
        for _ in range(300):
            world.update_physics(0.05)
            lead = next(c for c in world.cars.cars if c.car_type is CarType.SLOW)
            follower = next(c for c in world.cars.cars if c.car_type is CarType.NORMAL)
            gaps.append(lead.x - follower.x)
        return sorted((round(c.x, 9), round(c.y, 9), round(c.speed, 9)) for c in world.cars.cars), gaps

    def test_follower_keeps_its_distance(self) -> None:
        _, gaps = self._run(lead_first=True)
        self.assertGreater(min(gaps), 2.0)

    def test_result_does_not_depend_on_update_order(self) -> None:
        first, _ = self._run(lead_first=True)
        second, _ = self._run(lead_first=False)
        self.assertEqual(first, second)


if __name__ == "__main__":
    unittest.main()
