"""
road/renderer.py
================
Render-ready triangle mesh of a :class:`~road.geometry.RoadGeometry`.

The mesh holds plain arrays so any front-end (the pygame view, an
exporter, a test) can consume it:

* ``vertices``   – ``(n, 2)`` float32 positions shared by every list below
* ``triangles``  – index triples covering each lane/cross-section surface
* ``borders``    – index pairs tracing both borders plus end caps
* ``chosen``     – index pairs of the right border of the selected path

``changed`` is raised whenever any list is rebuilt and lowered again by
:meth:`RoadMesh.mark_uploaded` once a consumer has taken the new data.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

import numpy as np

from road.geometry import RoadGeometry, SegmentKey

log = logging.getLogger("road")

# Display colours (RGB 0-255) used by front-ends.
ROAD_COLOR = (40, 40, 40)
BORDER_COLOR = (0, 255, 255)
CHOSEN_COLOR = (255, 0, 0)


class RoadMesh:
    def __init__(self) -> None:
        self.vertices = np.zeros((0, 2), dtype=np.float32)
        self.triangles = np.zeros(0, dtype=np.uint32)
        self.borders = np.zeros(0, dtype=np.uint32)
        self.chosen = np.zeros(0, dtype=np.uint32)
        self.right_border: Dict[SegmentKey, List[int]] = {}
        self.changed = False

    def build(self, geometry: RoadGeometry) -> None:
        """Tessellate every segment of *geometry*; identical input gives
        identical arrays."""
        vertices: List[np.ndarray] = []
        triangles: List[int] = []
        borders: List[int] = []
        right_border: Dict[SegmentKey, List[int]] = {}

        def add(point: np.ndarray) -> int:
            vertices.append(point)
            return len(vertices) - 1

        for segment in geometry.segments():
            left = geometry.border_points(segment, "left")
            right = geometry.border_points(segment, "right")
            i1p = add(left[0])
            i2p = add(right[0])
            borders += [i1p, i2p]  # start cap
            right_idx: List[int] = []
            for k in range(1, len(left)):
                i1 = add(left[k])
                i2 = add(right[k])
                triangles += [i1p, i2p, i1, i1, i2p, i2]
                borders += [i1p, i1, i2p, i2]
                right_idx += [i2p, i2]
                i1p, i2p = i1, i2
            borders += [i1p, i2p]  # end cap
            right_border[segment.key] = right_idx

        self.vertices = np.asarray(vertices, dtype=np.float32).reshape(-1, 2)
        self.triangles = np.asarray(triangles, dtype=np.uint32)
        self.borders = np.asarray(borders, dtype=np.uint32)
        self.right_border = right_border
        self.chosen = np.zeros(0, dtype=np.uint32)
        self.changed = True
        log.debug(
            "road mesh: %d vertices, %d triangles, %d border lines",
            len(self.vertices), len(self.triangles) // 3, len(self.borders) // 2,
        )

    def set_chosen_path(self, segments: Optional[Iterable[SegmentKey]]) -> None:
        """Highlight the right border of *segments* (``None`` clears it)."""
        idx: List[int] = []
        for key in segments or ():
            idx += self.right_border.get(key, [])
        self.chosen = np.asarray(idx, dtype=np.uint32)
        self.changed = True

    def mark_uploaded(self) -> None:
        self.changed = False
