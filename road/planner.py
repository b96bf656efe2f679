"""
road/planner.py
===============
Shortest drivable route between two arbitrary points.

Both points are snapped to the nearest lane or cross-section centreline.
The search is Dijkstra over segments: a lane ``X→Y`` is followed by every
cross-section ``X→Y→Z`` and a cross-section ``X→Y→Z`` by the lane
``Y→Z``.  Edge weights are centreline arc lengths, so the route found is
the shortest one by driven distance.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from road.geometry import RoadGeometry, SegmentKey

log = logging.getLogger("planner")


@dataclass(frozen=True)
class Path:
    """Ordered segments from a start offset on the first segment to an end
    offset on the last.  Progress along the path is measured from the start
    point, so ``0 <= progress <= length``."""

    segments: Tuple[SegmentKey, ...]
    start_offset: float
    end_offset: float
    lengths: Tuple[float, ...]

    @property
    def length(self) -> float:
        return max(0.0, sum(self.lengths[:-1]) - self.start_offset + self.end_offset)

    def segment_start(self, index: int) -> float:
        """Path progress at which segment *index* begins (negative for 0)."""
        return sum(self.lengths[:index]) - self.start_offset

    def locate(self, progress: float) -> Tuple[int, float]:
        """Segment index and offset within that segment for *progress*."""
        s = self.start_offset + min(max(progress, 0.0), self.length)
        for i, seg_len in enumerate(self.lengths[:-1]):
            if s < seg_len:
                return i, s
            s -= seg_len
        return len(self.lengths) - 1, s

    def index_of(self, key: SegmentKey, from_index: int = 0) -> Optional[int]:
        for i in range(from_index, len(self.segments)):
            if self.segments[i] == key:
                return i
        return None

    def pose(self, geometry: RoadGeometry, progress: float) -> Tuple[np.ndarray, np.ndarray]:
        """Centreline position and unit tangent at *progress*."""
        i, offset = self.locate(progress)
        return geometry.segment(self.segments[i]).pose(offset)

    def is_valid_for(self, geometry: RoadGeometry) -> bool:
        """True when every segment still exists with the same length."""
        for key, seg_len in zip(self.segments, self.lengths):
            if not geometry.has_segment(key):
                return False
            if abs(geometry.segment(key).length - seg_len) > 1e-6:
                return False
        return True


def find_path(
    geometry: RoadGeometry,
    start: Sequence[float],
    end: Sequence[float],
    snap_radius: Optional[float] = None,
    max_expansions: int = 10_000,
) -> Optional[Path]:
    """Plan from *start* to *end*; ``None`` when either point is off-road,
    no route exists, or the search exceeds *max_expansions* segments."""
    src = geometry.nearest(start, max_distance=snap_radius)
    dst = geometry.nearest(end, max_distance=snap_radius)
    if src is None or dst is None:
        log.warning(
            "cannot snap %s to a road (start=%s, end=%s)",
            "start" if src is None else "end", tuple(start), tuple(end),
        )
        return None

    def make(route: Tuple[SegmentKey, ...]) -> Path:
        return Path(
            segments=route,
            start_offset=src.offset,
            end_offset=dst.offset,
            lengths=tuple(geometry.segment(k).length for k in route),
        )

    if src.key == dst.key and dst.offset >= src.offset:
        return make((src.key,))

    tie = itertools.count()
    first_cost = geometry.segment(src.key).length - src.offset
    heap = [(first_cost, next(tie), key, (src.key, key)) for key in geometry.successors(src.key)]
    heapq.heapify(heap)
    settled: Dict[SegmentKey, float] = {}
    expansions = 0

    while heap:
        cost, _, key, route = heapq.heappop(heap)
        if key == dst.key:
            path = make(route)
            log.debug(
                "path %s -> %s: %d segments, %.1f m",
                geometry.describe(src.key), geometry.describe(dst.key),
                len(route), path.length,
            )
            return path
        if key in settled:
            continue
        settled[key] = cost
        expansions += 1
        if expansions > max_expansions:
            log.warning("path search gave up after %d expansions", max_expansions)
            return None
        next_cost = cost + geometry.segment(key).length
        for nxt in geometry.successors(key):
            if nxt not in settled:
                heapq.heappush(heap, (next_cost, next(tie), nxt, route + (nxt,)))

    log.warning(
        "no route from %s to %s",
        geometry.describe(src.key), geometry.describe(dst.key),
    )
    return None
