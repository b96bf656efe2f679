#!/usr/bin/env python3
"""
Tests for the view's coordinate mapping, snapshot interpolation, input
bindings and road rasterisation.  No window is opened.
"""

from __future__ import annotations

import math
import unittest

import numpy as np
import pygame

from road.backbone import Backbone
from sim.car import CarType
from sim.commands import Cancel, Click, StartAdding
from sim.sim_bridge import SimBridge
from sim.traffic_policy import DrivingPolicy
from ui.helpers import angle_lerp, interpolate_vehicles
from ui.pygame_view import RoadSimView, command_for_key
from ui.types import Camera


class _RecordingBridge:
    tick_rate_hz = 20.0

    def __init__(self) -> None:
        self.sent = []
        self.paused = None
        self.resets = 0

    def send(self, command) -> None:
        self.sent.append(command)

    def set_paused(self, paused: bool) -> None:
        self.paused = paused

    def reset(self) -> None:
        self.resets += 1


class CameraTests(unittest.TestCase):
    def test_screen_world_round_trip(self) -> None:
        cam = Camera(800, 600, world_x=10.0, world_y=-5.0, zoom=4.0)
        sx, sy = cam.world_to_screen(12.0, -3.0)
        self.assertEqual((sx, sy), (408.0, 292.0))
        wx, wy = cam.screen_to_world(sx, sy)
        self.assertAlmostEqual(wx, 12.0)
        self.assertAlmostEqual(wy, -3.0)

    def test_array_mapping_matches_scalar(self) -> None:
        cam = Camera(640, 480, world_x=3.0, world_y=1.0, zoom=2.5)
        pts = np.array([[0.0, 0.0], [10.0, -4.0]])
        out = cam.world_to_screen_array(pts)
        for p, o in zip(pts, out):
            self.assertEqual(tuple(o), cam.world_to_screen(*p))

    def test_fit_centres_and_contains_points(self) -> None:
        cam = Camera(800, 600)
        pts = np.array([[-100.0, -20.0], [300.0, 80.0]])
        cam.fit(pts, margin_px=40)
        self.assertEqual((cam.world_x, cam.world_y), (100.0, 30.0))
        for p in pts:
            sx, sy = cam.world_to_screen(*p)
            self.assertTrue(0 <= sx <= 800 and 0 <= sy <= 600)

    def test_zoom_is_clamped(self) -> None:
        cam = Camera(800, 600)
        for _ in range(50):
            cam.zoom_by(2.0)
        self.assertEqual(cam.zoom, Camera.MAX_ZOOM)


class InterpolationTests(unittest.TestCase):
    def test_angle_lerp_takes_short_arc(self) -> None:
        a, b = math.radians(170), math.radians(-170)
        mid = angle_lerp(a, b, 0.5)
        self.assertAlmostEqual(abs(mid), math.pi)

    def test_vehicles_are_blended_by_id(self) -> None:
        prev = [{"id": "CAR_000", "x": 0.0, "y": 0.0, "speed": 10.0, "heading": 0.0}]
        curr = [
            {"id": "CAR_000", "x": 2.0, "y": 4.0, "speed": 20.0, "heading": 0.0},
            {"id": "CAR_001", "x": 9.0, "y": 9.0, "speed": 0.0, "heading": 1.0},
        ]
        out = interpolate_vehicles(prev, curr, 0.5)
        self.assertEqual((out[0]["x"], out[0]["y"], out[0]["speed"]), (1.0, 2.0, 15.0))
        self.assertIs(out[1], curr[1])

    def test_blend_factor_is_clamped(self) -> None:
        prev = [{"id": "A", "x": 0.0, "y": 0.0, "speed": 0.0, "heading": 0.0}]
        curr = [{"id": "A", "x": 1.0, "y": 0.0, "speed": 0.0, "heading": 0.0}]
        self.assertEqual(interpolate_vehicles(prev, curr, 3.0)[0]["x"], 1.0)


class InputTests(unittest.TestCase):
    def setUp(self) -> None:
        self.bridge = _RecordingBridge()
        self.view = RoadSimView(self.bridge, width=800, height=600)

    def test_key_bindings(self) -> None:
        self.assertEqual(command_for_key(pygame.K_n), StartAdding(CarType.NORMAL))
        self.assertEqual(command_for_key(pygame.K_s), StartAdding(CarType.SLOW))
        self.assertEqual(command_for_key(pygame.K_ESCAPE), Cancel())
        self.assertIsNone(command_for_key(pygame.K_x))

    def test_click_maps_through_camera(self) -> None:
        self.view.camera = Camera(800, 600, world_x=50.0, world_y=0.0, zoom=2.0)
        self.view._on_click(500, 280)
        self.assertEqual(self.bridge.sent, [Click(100.0, 10.0)])

    def test_button_click_starts_adding(self) -> None:
        slow = self.view.hud_buttons()[1]
        self.view._on_click(slow.x + 2, slow.y + 2)
        self.assertEqual(self.bridge.sent, [StartAdding(CarType.SLOW)])

    def test_pause_reset_and_quit_keys(self) -> None:
        self.assertTrue(self.view._on_key(pygame.K_SPACE))
        self.assertTrue(self.bridge.paused)
        self.view._on_key(pygame.K_r)
        self.assertEqual(self.bridge.resets, 1)
        self.assertFalse(self.bridge.paused)
        self.assertFalse(self.view._on_key(pygame.K_q))


class RasteriseTests(unittest.TestCase):
    def test_road_centre_is_filled(self) -> None:
        bb = Backbone()
        w, e = bb.add_location("W"), bb.add_location("E")
        bb.add_road(w, e, [bb.add_point((0.0, 0.0), (1.0, 0.0)), bb.add_point((100.0, 0.0), (1.0, 0.0))])
        bridge = SimBridge(backbone=bb, policy=DrivingPolicy(semaphore_enabled=False))
        version, mesh = bridge.get_mesh()

        view = RoadSimView(bridge, width=400, height=200)
        view.camera = Camera(400, 200, world_x=50.0, world_y=0.0, zoom=3.0)
        layer = view._rasterise_mesh(view.camera, mesh)
        sx, sy = view.camera.world_to_screen(50.0, 0.0)
        self.assertEqual(tuple(layer.get_at((int(sx), int(sy))))[:3], view.ROAD_COLOR)
        self.assertEqual(tuple(layer.get_at((5, 5)))[3], 0)


if __name__ == "__main__":
    unittest.main()
