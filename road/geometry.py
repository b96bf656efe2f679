"""
road/geometry.py
================
Lane-accurate curve geometry built from a :class:`~road.backbone.Backbone`.

Every road becomes a :class:`Lane` and every cross-section a
:class:`CrossSectionGeometry`.  Both hold three parallel sequences of
Bezier handles into the shared :attr:`RoadGeometry.beziers` arena —
centreline, left border and right border, one entry per consecutive pair
of control points — plus an arc-length table of the centreline used for
continuous position and deviation queries.

Segments are addressed by :class:`SegmentKey`: ``(from, to)`` for a lane,
``(from, to, across)`` for a cross-section.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from road.backbone import Backbone, LocationId, PointId
from road.bezier import Bezier, unit
from road.errors import (
    BoundaryMismatchError,
    DisconnectedGeometryError,
    TooFewControlPointsError,
    UnknownHandleError,
)

log = logging.getLogger("road")

_JOIN_TOLERANCE = 1e-6


@dataclass(frozen=True)
class SegmentKey:
    """Identity of a lane or a cross-section within one geometry."""

    from_id: LocationId
    to_id: LocationId
    across_id: Optional[LocationId] = None

    @property
    def is_cross_section(self) -> bool:
        return self.across_id is not None


@dataclass(frozen=True)
class Projection:
    """Nearest centreline point of one segment to a query position."""

    key: SegmentKey
    offset: float
    distance: float
    point: Tuple[float, float]


class _Segment:
    """Curve sequences and centreline arc-length table of one drivable piece."""

    def __init__(
        self,
        key: SegmentKey,
        center: Sequence[int],
        left: Sequence[int],
        right: Sequence[int],
        polyline: np.ndarray,
    ) -> None:
        if len(left) != len(right) or len(left) != len(center):
            raise BoundaryMismatchError(
                f"{key}: left/right border counts differ ({len(left)} vs {len(right)})"
            )
        self.key = key
        self.center: Tuple[int, ...] = tuple(center)
        self.left: Tuple[int, ...] = tuple(left)
        self.right: Tuple[int, ...] = tuple(right)
        self.polyline = polyline
        pieces = np.linalg.norm(np.diff(polyline, axis=0), axis=1)
        self.cumulative = np.concatenate([[0.0], np.cumsum(pieces)])

    @property
    def from_id(self) -> LocationId:
        return self.key.from_id

    @property
    def to_id(self) -> LocationId:
        return self.key.to_id

    @property
    def length(self) -> float:
        return float(self.cumulative[-1])

    def pose(self, offset: float) -> Tuple[np.ndarray, np.ndarray]:
        """Centreline position and unit tangent at arc length *offset*."""
        s = min(max(offset, 0.0), self.length)
        i = int(np.searchsorted(self.cumulative, s, side="right")) - 1
        i = min(max(i, 0), len(self.polyline) - 2)
        a = self.polyline[i]
        b = self.polyline[i + 1]
        piece = self.cumulative[i + 1] - self.cumulative[i]
        frac = 0.0 if piece <= 0.0 else (s - self.cumulative[i]) / piece
        tangent = b - a
        norm = float(np.hypot(tangent[0], tangent[1]))
        if norm > 0.0:
            tangent = tangent / norm
        return a + (b - a) * frac, tangent

    def project(self, point: Sequence[float]) -> Tuple[float, float, np.ndarray]:
        """Return ``(offset, distance, nearest_point)`` for *point*."""
        p = np.asarray(point, dtype=float)
        a = self.polyline[:-1]
        ab = self.polyline[1:] - a
        denom = np.maximum(np.einsum("ij,ij->i", ab, ab), 1e-12)
        t = np.clip(np.einsum("ij,ij->i", p - a, ab) / denom, 0.0, 1.0)
        closest = a + ab * t[:, None]
        dist = np.linalg.norm(closest - p, axis=1)
        i = int(np.argmin(dist))
        offset = self.cumulative[i] + t[i] * (self.cumulative[i + 1] - self.cumulative[i])
        return float(offset), float(dist[i]), closest[i]


class Lane(_Segment):
    """Drivable curve generated from one road, in the road's direction."""


class CrossSectionGeometry(_Segment):
    """Connector from the tail of one lane to the head of another."""

    @property
    def across_id(self) -> LocationId:
        return self.key.across_id


class RoadGeometry:
    """Lanes and cross-sections of a backbone, immutable once built.

    Parameters
    ----------
    backbone : Backbone
        Source network.
    half_width : float
        Lateral distance from a centreline to each border (m).
    subdivisions : int
        Linear steps per Bezier when tessellating borders for rendering.
    arc_samples : int
        Linear steps per Bezier in the centreline arc-length table.
    """

    def __init__(
        self,
        backbone: Backbone,
        half_width: float = 1.75,
        subdivisions: int = 16,
        arc_samples: int = 32,
    ) -> None:
        self.backbone = backbone
        self.half_width = float(half_width)
        self.subdivisions = int(subdivisions)
        self.arc_samples = int(arc_samples)

        self.beziers: List[Bezier] = []
        self.lanes: List[Lane] = []
        self.cross_sections: List[CrossSectionGeometry] = []
        self._segments: Dict[SegmentKey, _Segment] = {}
        self._successors: Dict[SegmentKey, List[SegmentKey]] = {}

        for road in backbone.roads:
            key = SegmentKey(road.from_id, road.to_id)
            lane = Lane(key, *self._build_curves(road.points, key))
            self.lanes.append(lane)
            self._segments[key] = lane

        for cross in backbone.cross_sections:
            key = SegmentKey(cross.from_id, cross.to_id, cross.across_id)
            self._check_joins(key, cross.points)
            geom = CrossSectionGeometry(key, *self._build_curves(cross.points, key))
            self.cross_sections.append(geom)
            self._segments[key] = geom

        self._link()
        log.info(
            "road geometry built: %d lanes, %d cross-sections, %d beziers",
            len(self.lanes), len(self.cross_sections), len(self.beziers),
        )

    # ── construction ──────────────────────────────────────────────────────

    def _build_curves(
        self,
        point_ids: Sequence[PointId],
        key: SegmentKey,
    ) -> Tuple[List[int], List[int], List[int], np.ndarray]:
        if len(point_ids) < 2:
            raise TooFewControlPointsError(
                f"{self.describe(key)} needs at least 2 control points"
            )
        center: List[int] = []
        left: List[int] = []
        right: List[int] = []
        samples: List[np.ndarray] = []
        for a_id, b_id in zip(point_ids, point_ids[1:]):
            a = self.backbone.point(a_id)
            b = self.backbone.point(b_id)
            mid = Bezier.between(a.position, a.direction, b.position, b.direction)
            center.append(self._add(mid))
            left.append(self._add(
                Bezier.between(a.position, a.direction, b.position, b.direction, self.half_width)
            ))
            right.append(self._add(
                Bezier.between(a.position, a.direction, b.position, b.direction, -self.half_width)
            ))
            pts = mid.sample(self.arc_samples)
            samples.append(pts if not samples else pts[1:])
        if len(left) != len(right):
            raise BoundaryMismatchError(f"{self.describe(key)}: border counts differ")
        return center, left, right, np.vstack(samples)

    def _add(self, bezier: Bezier) -> int:
        self.beziers.append(bezier)
        return len(self.beziers) - 1

    def _check_joins(self, key: SegmentKey, point_ids: Sequence[PointId]) -> None:
        """The connector must start where its incoming lane ends and end
        where its outgoing lane starts, when those lanes exist."""
        if len(point_ids) < 2:
            raise TooFewControlPointsError(
                f"{self.describe(key)} needs at least 2 control points"
            )
        incoming = self._road_points(key.from_id, key.across_id)
        if incoming is not None:
            self._check_same_anchor(key, incoming[-1], point_ids[0], "entry")
        outgoing = self._road_points(key.across_id, key.to_id)
        if outgoing is not None:
            self._check_same_anchor(key, outgoing[0], point_ids[-1], "exit")

    def _road_points(self, from_id: LocationId, to_id: LocationId) -> Optional[Tuple[PointId, ...]]:
        for road in self.backbone.roads:
            if road.from_id == from_id and road.to_id == to_id:
                return road.points
        return None

    def _check_same_anchor(self, key: SegmentKey, lane_pt: PointId, cross_pt: PointId, which: str) -> None:
        if lane_pt == cross_pt:
            return
        a = self.backbone.point(lane_pt)
        b = self.backbone.point(cross_pt)
        gap = math.hypot(a.position[0] - b.position[0], a.position[1] - b.position[1])
        ua, ub = unit(a.direction), unit(b.direction)
        turn = math.hypot(ua[0] - ub[0], ua[1] - ub[1])
        if gap > _JOIN_TOLERANCE or turn > _JOIN_TOLERANCE:
            raise DisconnectedGeometryError(
                f"{self.describe(key)} {which} does not meet its lane "
                f"(gap={gap:.3g} m, direction change={turn:.3g})"
            )

    def _link(self) -> None:
        by_junction: Dict[Tuple[LocationId, LocationId], List[SegmentKey]] = {}
        for cross in self.cross_sections:
            by_junction.setdefault((cross.from_id, cross.across_id), []).append(cross.key)
        for lane in self.lanes:
            self._successors[lane.key] = list(by_junction.get((lane.from_id, lane.to_id), []))
        for cross in self.cross_sections:
            out = SegmentKey(cross.across_id, cross.to_id)
            self._successors[cross.key] = [out] if out in self._segments else []

    # ── queries ───────────────────────────────────────────────────────────

    def get_bezier(self, index: int) -> Bezier:
        return self.beziers[index]

    def segments(self) -> List[_Segment]:
        """Lanes first, then cross-sections, in backbone order."""
        return [*self.lanes, *self.cross_sections]

    def has_segment(self, key: SegmentKey) -> bool:
        return key in self._segments

    def segment(self, key: SegmentKey) -> _Segment:
        try:
            return self._segments[key]
        except KeyError:
            raise UnknownHandleError(f"no segment {key}") from None

    def lane(self, from_id: LocationId, to_id: LocationId) -> Lane:
        return self.segment(SegmentKey(from_id, to_id))

    def cross_section(
        self, from_id: LocationId, across_id: LocationId, to_id: LocationId,
    ) -> CrossSectionGeometry:
        return self.segment(SegmentKey(from_id, to_id, across_id))

    def successors(self, key: SegmentKey) -> List[SegmentKey]:
        """Segments a car may enter when it leaves *key*."""
        return list(self._successors.get(key, []))

    def cross_sections_through(self, location_id: LocationId) -> List[CrossSectionGeometry]:
        return [c for c in self.cross_sections if c.across_id == location_id]

    def border_points(self, segment: _Segment, side: str) -> np.ndarray:
        """Tessellated ``"left"`` or ``"right"`` border of *segment*."""
        handles = segment.left if side == "left" else segment.right
        parts = []
        for i, handle in enumerate(handles):
            pts = self.beziers[handle].sample(self.subdivisions)
            parts.append(pts if i == 0 else pts[1:])
        return np.vstack(parts)

    def nearest(
        self,
        position: Sequence[float],
        max_distance: Optional[float] = None,
        keys: Optional[Iterable[SegmentKey]] = None,
    ) -> Optional[Projection]:
        """Closest centreline point over all (or the given) segments."""
        candidates = self.segments() if keys is None else [self.segment(k) for k in keys]
        best: Optional[Projection] = None
        for seg in candidates:
            offset, dist, point = seg.project(position)
            if best is None or dist < best.distance:
                best = Projection(
                    key=seg.key,
                    offset=offset,
                    distance=dist,
                    point=(float(point[0]), float(point[1])),
                )
        if best is None or (max_distance is not None and best.distance > max_distance):
            return None
        return best

    def describe(self, key: SegmentKey) -> str:
        name = self.backbone.name_of
        if key.is_cross_section:
            return f"cross-section {name(key.from_id)}->{name(key.across_id)}->{name(key.to_id)}"
        return f"lane {name(key.from_id)}->{name(key.to_id)}"
