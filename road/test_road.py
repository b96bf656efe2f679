#!/usr/bin/env python3
"""
Tests for the backbone arena, the geometry builder and the road mesh.
"""

from __future__ import annotations

import math
import unittest

import numpy as np

from road.backbone import Backbone, _is_connected, default_backbone, grid_backbone
from road.errors import (
    ConstructionError,
    DisconnectedGeometryError,
    DuplicateLocationError,
    TooFewControlPointsError,
    UnknownHandleError,
)
from road.geometry import RoadGeometry, SegmentKey
from road.renderer import RoadMesh


def _close(a, b, tol: float = 1e-9) -> bool:
    return math.hypot(a[0] - b[0], a[1] - b[1]) <= tol


class BackboneTests(unittest.TestCase):
    def test_duplicate_location_name_is_rejected(self) -> None:
        bb = Backbone()
        bb.add_location("A")
        with self.assertRaises(DuplicateLocationError):
            bb.add_location("A")

    def test_road_needs_two_points(self) -> None:
        bb = Backbone()
        a, b = bb.add_location("A"), bb.add_location("B")
        p = bb.add_point((0.0, 0.0), (1.0, 0.0))
        with self.assertRaises(TooFewControlPointsError):
            bb.add_road(a, b, [p])

    def test_unknown_handles_are_rejected(self) -> None:
        bb = Backbone()
        a = bb.add_location("A")
        p = bb.add_point((0.0, 0.0), (1.0, 0.0))
        q = bb.add_point((10.0, 0.0), (1.0, 0.0))
        with self.assertRaises(UnknownHandleError):
            bb.add_road(a, 7, [p, q])
        with self.assertRaises(UnknownHandleError):
            bb.add_road(a, a, [p, 42])
        with self.assertRaises(UnknownHandleError):
            bb.location("nowhere")

    def test_zero_direction_is_rejected(self) -> None:
        with self.assertRaises(ConstructionError):
            Backbone().add_point((1.0, 1.0), (0.0, 0.0))

    def test_default_layout(self) -> None:
        bb = default_backbone()
        self.assertEqual([loc.name for loc in bb.locations], ["A", "B", "C", "D"])
        self.assertEqual(len(bb.roads), 3)
        self.assertEqual(len(bb.cross_sections), 3)
        self.assertEqual([s.location_id for s in bb.streetlights], [bb.location("B")])

    def test_grid_counts(self) -> None:
        bb = grid_backbone(2, 2)
        junctions = [loc for loc in bb.locations if "." not in loc.name]
        self.assertEqual(len(junctions), 4)
        # 4 shared edges * 2 directions + 8 terminal arms * 2 directions
        self.assertEqual(len(bb.roads), 24)
        self.assertEqual(len(bb.cross_sections), 4 * 12)
        self.assertEqual(len(bb.streetlights), 2)

    def test_grid_drop_keeps_network_buildable(self) -> None:
        bb = grid_backbone(3, 3, drop=2, seed=1)
        junctions = [loc for loc in bb.locations if "." not in loc.name]
        self.assertEqual(len(junctions), 7)
        RoadGeometry(bb)

    def test_cell_connectivity(self) -> None:
        self.assertTrue(_is_connected([]))
        self.assertTrue(_is_connected([(0, 0), (0, 1), (1, 1)]))
        self.assertFalse(_is_connected([(0, 0), (1, 1)]))
        self.assertFalse(_is_connected([(0, 0), (0, 1), (2, 0), (2, 1)]))

    def test_heavy_drop_keeps_two_junctions(self) -> None:
        for seed in range(5):
            bb = grid_backbone(3, 3, drop=8, seed=seed)
            junctions = [loc for loc in bb.locations if "." not in loc.name]
            self.assertGreaterEqual(len(junctions), 2)
            RoadGeometry(bb)


class GeometryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.bb = default_backbone()
        self.geom = RoadGeometry(self.bb, half_width=1.75)
        self.a, self.b, self.c, self.d = (self.bb.location(n) for n in "ABCD")

    def test_one_curve_per_point_pair(self) -> None:
        lane = self.geom.lane(self.a, self.b)
        self.assertEqual(len(lane.center), 2)
        self.assertEqual(len(lane.left), len(lane.right))
        self.assertEqual(len(self.geom.lanes), 3)
        self.assertEqual(len(self.geom.cross_sections), 3)

    def test_borders_are_continuous_within_a_lane(self) -> None:
        for seg in self.geom.segments():
            for handles in (seg.left, seg.right, seg.center):
                for h1, h2 in zip(handles, handles[1:]):
                    self.assertTrue(
                        _close(self.geom.get_bezier(h1).p3, self.geom.get_bezier(h2).p0)
                    )

    def test_borders_meet_across_a_junction(self) -> None:
        lane = self.geom.lane(self.a, self.b)
        cross = self.geom.cross_section(self.a, self.b, self.c)
        out = self.geom.lane(self.b, self.c)
        for side in ("left", "right"):
            lane_end = self.geom.get_bezier(getattr(lane, side)[-1]).p3
            cross_start = self.geom.get_bezier(getattr(cross, side)[0]).p0
            cross_end = self.geom.get_bezier(getattr(cross, side)[-1]).p3
            out_start = self.geom.get_bezier(getattr(out, side)[0]).p0
            self.assertTrue(_close(lane_end, cross_start))
            self.assertTrue(_close(cross_end, out_start))

    def test_borders_are_half_width_from_centre_at_anchors(self) -> None:
        for seg in self.geom.segments():
            for hc, hl, hr in zip(seg.center, seg.left, seg.right):
                c, l, r = (self.geom.get_bezier(h) for h in (hc, hl, hr))
                for attr in ("p0", "p3"):
                    cp = getattr(c, attr)
                    self.assertAlmostEqual(math.dist(cp, getattr(l, attr)), 1.75, places=9)
                    self.assertAlmostEqual(math.dist(cp, getattr(r, attr)), 1.75, places=9)

    def test_straight_road_is_symmetric(self) -> None:
        bb = Backbone()
        a, b = bb.add_location("A"), bb.add_location("B")
        bb.add_road(a, b, [bb.add_point((0, 0), (1, 0)), bb.add_point((50, 0), (1, 0))])
        geom = RoadGeometry(bb, half_width=2.0)
        lane = geom.lane(a, b)
        left = geom.border_points(lane, "left")
        right = geom.border_points(lane, "right")
        np.testing.assert_allclose((left + right) / 2.0, geom.get_bezier(lane.center[0]).sample(16), atol=1e-9)
        np.testing.assert_allclose(left[:, 1], 2.0)
        np.testing.assert_allclose(right[:, 1], -2.0)

    def test_pose_hits_endpoints_and_length(self) -> None:
        lane = self.geom.lane(self.b, self.c)
        start, tangent = lane.pose(0.0)
        end, _ = lane.pose(lane.length)
        np.testing.assert_allclose(start, (30.0, 13.0), atol=1e-9)
        np.testing.assert_allclose(end, (70.0, 13.0), atol=1e-9)
        np.testing.assert_allclose(tangent, (1.0, 0.0), atol=1e-9)
        self.assertAlmostEqual(lane.length, 40.0, places=6)

    def test_projection_measures_lateral_distance(self) -> None:
        lane = self.geom.lane(self.b, self.c)
        offset, dist, point = lane.project((50.0, 15.0))
        self.assertAlmostEqual(offset, 20.0, places=6)
        self.assertAlmostEqual(dist, 2.0, places=6)
        proj = self.geom.nearest((50.0, 15.0))
        self.assertEqual(proj.key, SegmentKey(self.b, self.c))
        self.assertIsNone(self.geom.nearest((500.0, 500.0), max_distance=5.0))

    def test_successors_follow_junctions(self) -> None:
        ab = SegmentKey(self.a, self.b)
        self.assertEqual(
            set(self.geom.successors(ab)),
            {SegmentKey(self.a, self.c, self.b), SegmentKey(self.a, self.d, self.b)},
        )
        self.assertEqual(
            self.geom.successors(SegmentKey(self.d, self.c, self.b)),
            [SegmentKey(self.b, self.c)],
        )
        self.assertEqual(self.geom.successors(SegmentKey(self.b, self.c)), [])

    def test_disconnected_cross_section_is_rejected(self) -> None:
        bb = Backbone()
        a, b, c = (bb.add_location(n) for n in "ABC")
        p1 = bb.add_point((0, 0), (1, 0))
        p2 = bb.add_point((20, 0), (1, 0))
        p2_shifted = bb.add_point((20, 0.5), (1, 0))
        p3 = bb.add_point((30, 10), (0, 1))
        bb.add_road(a, b, [p1, p2])
        bb.add_cross_section(a, b, c, [p2_shifted, p3])
        with self.assertRaises(DisconnectedGeometryError):
            RoadGeometry(bb)

    def test_turned_cross_section_is_rejected(self) -> None:
        bb = Backbone()
        a, b, c = (bb.add_location(n) for n in "ABC")
        p1 = bb.add_point((0, 0), (1, 0))
        p2 = bb.add_point((20, 0), (1, 0))
        p2_turned = bb.add_point((20, 0), (1, 1))
        p3 = bb.add_point((30, 10), (0, 1))
        bb.add_road(a, b, [p1, p2])
        bb.add_cross_section(a, b, c, [p2_turned, p3])
        with self.assertRaises(DisconnectedGeometryError):
            RoadGeometry(bb)

    def test_unknown_segment_raises(self) -> None:
        with self.assertRaises(UnknownHandleError):
            self.geom.lane(self.c, self.a)


class RoadMeshTests(unittest.TestCase):
    def setUp(self) -> None:
        self.bb = default_backbone()
        self.geom = RoadGeometry(self.bb, subdivisions=16)

    def test_triangle_and_border_counts(self) -> None:
        mesh = RoadMesh()
        mesh.build(self.geom)
        steps = sum(16 * len(seg.center) for seg in self.geom.segments())
        self.assertEqual(len(mesh.triangles), 6 * steps)
        self.assertEqual(len(mesh.borders), 4 * steps + 4 * len(self.geom.segments()))
        self.assertEqual(len(mesh.vertices), 2 * (steps + len(self.geom.segments())))
        self.assertLess(int(mesh.triangles.max()), len(mesh.vertices))

    def test_build_is_idempotent(self) -> None:
        first, second = RoadMesh(), RoadMesh()
        first.build(self.geom)
        second.build(RoadGeometry(default_backbone(), subdivisions=16))
        np.testing.assert_array_equal(first.vertices, second.vertices)
        np.testing.assert_array_equal(first.triangles, second.triangles)
        np.testing.assert_array_equal(first.borders, second.borders)

    def test_changed_flag_and_chosen_path(self) -> None:
        mesh = RoadMesh()
        self.assertFalse(mesh.changed)
        mesh.build(self.geom)
        self.assertTrue(mesh.changed)
        mesh.mark_uploaded()
        self.assertFalse(mesh.changed)

        a, b, c = (self.bb.location(n) for n in "ABC")
        keys = [SegmentKey(a, b), SegmentKey(a, c, b), SegmentKey(b, c)]
        mesh.set_chosen_path(keys)
        self.assertTrue(mesh.changed)
        expected = [i for k in keys for i in mesh.right_border[k]]
        self.assertEqual(mesh.chosen.tolist(), expected)

        mesh.mark_uploaded()
        mesh.set_chosen_path(None)
        self.assertTrue(mesh.changed)
        self.assertEqual(len(mesh.chosen), 0)


if __name__ == "__main__":
    unittest.main()
