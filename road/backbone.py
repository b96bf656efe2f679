"""
road/backbone.py
================
Sparse description of a road network before any curve is built.

The :class:`Backbone` is a flat arena: locations, control points, roads,
cross-sections and streetlights live in lists and refer to each other by
integer handle, so looping networks never form ownership cycles.

:func:`default_backbone` builds the four-location demo scenario;
:func:`grid_backbone` lays out a (possibly thinned) grid of junctions with
two-way roads, terminal arms and every non-U-turn connector.
"""

from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from road.bezier import Vec2
from road.errors import (
    ConstructionError,
    DuplicateLocationError,
    TooFewControlPointsError,
    UnknownHandleError,
)

log = logging.getLogger("road")

LocationId = int
PointId = int


# ── Arena records ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Location:
    id: LocationId
    name: str


@dataclass(frozen=True)
class ControlPoint:
    """Interpolation anchor: a position plus the travel direction there."""

    position: Vec2
    direction: Vec2


@dataclass(frozen=True)
class RoadDef:
    """Directed road ``from_id → to_id`` through an ordered point list."""

    from_id: LocationId
    to_id: LocationId
    points: Tuple[PointId, ...]


@dataclass(frozen=True)
class CrossSectionDef:
    """Junction connector ``from_id → across_id → to_id``."""

    from_id: LocationId
    across_id: LocationId
    to_id: LocationId
    points: Tuple[PointId, ...]


@dataclass(frozen=True)
class StreetLightDef:
    """Traffic light at a junction location.

    ``phases`` lists groups of approach locations that share a green
    phase; an empty tuple means one phase per approach.
    """

    location_id: LocationId
    phases: Tuple[Tuple[LocationId, ...], ...] = ()


# ── Backbone ──────────────────────────────────────────────────────────────────

class Backbone:
    """Arena of named locations, control points and their connections."""

    def __init__(self) -> None:
        self.locations: List[Location] = []
        self.points: List[ControlPoint] = []
        self.roads: List[RoadDef] = []
        self.cross_sections: List[CrossSectionDef] = []
        self.streetlights: List[StreetLightDef] = []
        self._by_name: Dict[str, LocationId] = {}

    # ── building ──────────────────────────────────────────────────────────

    def add_location(self, name: str) -> LocationId:
        if name in self._by_name:
            raise DuplicateLocationError(f"duplicate location name {name!r}")
        loc = Location(id=len(self.locations), name=name)
        self.locations.append(loc)
        self._by_name[name] = loc.id
        return loc.id

    def add_point(self, position: Sequence[float], direction: Sequence[float]) -> PointId:
        if abs(direction[0]) < 1e-12 and abs(direction[1]) < 1e-12:
            raise ConstructionError(f"control point at {tuple(position)!r} has no direction")
        self.points.append(
            ControlPoint(
                position=(float(position[0]), float(position[1])),
                direction=(float(direction[0]), float(direction[1])),
            )
        )
        return len(self.points) - 1

    def add_road(
        self,
        from_id: LocationId,
        to_id: LocationId,
        points: Sequence[PointId],
    ) -> RoadDef:
        self._check_location(from_id)
        self._check_location(to_id)
        pts = self._check_points(points, f"road {self.name_of(from_id)}->{self.name_of(to_id)}")
        if any(r.from_id == from_id and r.to_id == to_id for r in self.roads):
            raise ConstructionError(
                f"duplicate road {self.name_of(from_id)}->{self.name_of(to_id)}"
            )
        road = RoadDef(from_id=from_id, to_id=to_id, points=pts)
        self.roads.append(road)
        return road

    def add_cross_section(
        self,
        from_id: LocationId,
        across_id: LocationId,
        to_id: LocationId,
        points: Sequence[PointId],
    ) -> CrossSectionDef:
        for loc in (from_id, across_id, to_id):
            self._check_location(loc)
        label = (
            f"cross-section {self.name_of(from_id)}->"
            f"{self.name_of(across_id)}->{self.name_of(to_id)}"
        )
        pts = self._check_points(points, label)
        if any(
            (c.from_id, c.across_id, c.to_id) == (from_id, across_id, to_id)
            for c in self.cross_sections
        ):
            raise ConstructionError(f"duplicate {label}")
        cross = CrossSectionDef(from_id=from_id, across_id=across_id, to_id=to_id, points=pts)
        self.cross_sections.append(cross)
        return cross

    def add_streetlight(
        self,
        location_id: LocationId,
        phases: Sequence[Sequence[LocationId]] = (),
    ) -> StreetLightDef:
        self._check_location(location_id)
        groups = tuple(tuple(group) for group in phases)
        for group in groups:
            for loc in group:
                self._check_location(loc)
        light = StreetLightDef(location_id=location_id, phases=groups)
        self.streetlights.append(light)
        return light

    # ── queries ───────────────────────────────────────────────────────────

    def location(self, name: str) -> LocationId:
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownHandleError(f"unknown location {name!r}") from None

    def name_of(self, location_id: LocationId) -> str:
        self._check_location(location_id)
        return self.locations[location_id].name

    def point(self, point_id: PointId) -> ControlPoint:
        return self.points[point_id]

    # ── validation ────────────────────────────────────────────────────────

    def _check_location(self, location_id: LocationId) -> None:
        if not isinstance(location_id, int) or not 0 <= location_id < len(self.locations):
            raise UnknownHandleError(f"unknown location handle {location_id!r}")

    def _check_points(self, points: Sequence[PointId], label: str) -> Tuple[PointId, ...]:
        pts = tuple(points)
        if len(pts) < 2:
            raise TooFewControlPointsError(
                f"{label} needs at least 2 control points, got {len(pts)}"
            )
        for p in pts:
            if not isinstance(p, int) or not 0 <= p < len(self.points):
                raise UnknownHandleError(f"{label}: unknown control point handle {p!r}")
        return pts


# ── Default layout ────────────────────────────────────────────────────────────

def default_backbone() -> Backbone:
    """Four locations around one junction B, with a streetlight at B."""
    backbone = Backbone()

    a = backbone.add_location("A")
    b = backbone.add_location("B")
    c = backbone.add_location("C")
    d = backbone.add_location("D")

    p1 = backbone.add_point((-20.0, -40.0), (0.0, 3.0))
    p2 = backbone.add_point((-10.0, -10.0), (1.0, 2.0))
    p3 = backbone.add_point((0.0, 0.0), (2.0, 1.0))
    p4 = backbone.add_point((30.0, 13.0), (1.0, 0.0))
    p5 = backbone.add_point((13.0, 30.0), (0.0, 1.0))
    p6 = backbone.add_point((70.0, 13.0), (1.0, 0.0))
    p7 = backbone.add_point((13.0, 30.0), (0.0, -1.0))
    p8 = backbone.add_point((7.0, 60.0), (-0.5, 1.0))

    backbone.add_road(a, b, [p1, p2, p3])
    backbone.add_road(b, c, [p4, p6])
    backbone.add_road(b, d, [p5, p8])

    backbone.add_cross_section(a, b, c, [p3, p4])
    backbone.add_cross_section(a, b, d, [p3, p5])
    backbone.add_cross_section(d, b, c, [p7, p4])

    backbone.add_streetlight(b)
    return backbone


# ── Procedural grid ───────────────────────────────────────────────────────────

_ARMS: Dict[str, Vec2] = {
    "E": (1.0, 0.0),
    "N": (0.0, 1.0),
    "W": (-1.0, 0.0),
    "S": (0.0, -1.0),
}
_OPPOSITE = {"E": "W", "W": "E", "N": "S", "S": "N"}
_AXIS = {"E": "EW", "W": "EW", "N": "NS", "S": "NS"}


def grid_backbone(
    rows: int = 2,
    cols: int = 2,
    spacing: float = 80.0,
    *,
    lane_half_width: float = 1.75,
    junction_radius: float = 8.0,
    terminal_length: float = 40.0,
    drop: int = 0,
    seed: Optional[int] = None,
) -> Backbone:
    """Build a grid of junctions joined by two-way, right-hand-traffic roads.

    Parameters
    ----------
    rows, cols : int
        Grid size.
    spacing : float
        Centre-to-centre junction distance (m).
    lane_half_width : float
        Each lane centreline sits this far right of the road axis.
    junction_radius : float
        Roads start/end this far from the junction centre; the
        cross-sections fill the gap.
    terminal_length : float
        Length of the dead-end arms added on the grid border.
    drop : int
        Number of junctions to remove at random, keeping the rest
        connected.
    seed : int or None
        Random seed for the removal.
    """
    if rows < 1 or cols < 1:
        raise ConstructionError(f"grid needs at least one junction, got {rows}x{cols}")

    rng = random.Random(seed)
    grid: Dict[Tuple[int, int], Vec2] = {}
    offset_x = -(cols - 1) * spacing / 2.0
    offset_y = -(rows - 1) * spacing / 2.0
    for r in range(rows):
        for c in range(cols):
            grid[(r, c)] = (offset_x + c * spacing, offset_y + r * spacing)

    # Remove some junctions while keeping the rest connected
    candidates = list(grid.keys())
    rng.shuffle(candidates)
    removed = 0
    for pos in candidates:
        if removed >= drop or len(grid) <= 2:
            break
        if _is_connected(set(grid) - {pos}):
            del grid[pos]
            removed += 1

    backbone = Backbone()
    junction_ids: Dict[Tuple[int, int], LocationId] = {}
    for i, pos in enumerate(sorted(grid)):
        junction_ids[pos] = backbone.add_location(f"INT_{_letters(i)}")

    # Per (junction, arm): the inbound and outbound anchors near the centre
    inbound: Dict[Tuple[Tuple[int, int], str], PointId] = {}
    outbound: Dict[Tuple[Tuple[int, int], str], PointId] = {}
    for pos, (cx, cy) in grid.items():
        for arm, (ux, uy) in _ARMS.items():
            rx, ry = uy, -ux  # right normal of the outward direction
            base_x = cx + ux * junction_radius
            base_y = cy + uy * junction_radius
            outbound[(pos, arm)] = backbone.add_point(
                (base_x + rx * lane_half_width, base_y + ry * lane_half_width), (ux, uy)
            )
            inbound[(pos, arm)] = backbone.add_point(
                (base_x - rx * lane_half_width, base_y - ry * lane_half_width), (-ux, -uy)
            )

    # Neighbour reached through each arm: another junction or a terminal
    neighbour: Dict[Tuple[Tuple[int, int], str], LocationId] = {}
    for pos, (cx, cy) in grid.items():
        r, c = pos
        for arm, (ux, uy) in _ARMS.items():
            other = (r + int(uy), c + int(ux))
            if other in grid:
                neighbour[(pos, arm)] = junction_ids[other]
                if pos < other:
                    back = _OPPOSITE[arm]
                    backbone.add_road(
                        junction_ids[pos], junction_ids[other],
                        [outbound[(pos, arm)], inbound[(other, back)]],
                    )
                    backbone.add_road(
                        junction_ids[other], junction_ids[pos],
                        [outbound[(other, back)], inbound[(pos, arm)]],
                    )
                continue

            terminal = backbone.add_location(f"{backbone.name_of(junction_ids[pos])}.{arm}")
            neighbour[(pos, arm)] = terminal
            rx, ry = uy, -ux
            far_x = cx + ux * (junction_radius + terminal_length)
            far_y = cy + uy * (junction_radius + terminal_length)
            far_out = backbone.add_point(
                (far_x + rx * lane_half_width, far_y + ry * lane_half_width), (ux, uy)
            )
            far_in = backbone.add_point(
                (far_x - rx * lane_half_width, far_y - ry * lane_half_width), (-ux, -uy)
            )
            backbone.add_road(junction_ids[pos], terminal, [outbound[(pos, arm)], far_out])
            backbone.add_road(terminal, junction_ids[pos], [far_in, inbound[(pos, arm)]])

    # Connectors through every junction, U-turns excluded
    for i, pos in enumerate(sorted(grid)):
        j = junction_ids[pos]
        for arm_in in _ARMS:
            for arm_out in _ARMS:
                if arm_in == arm_out:
                    continue
                backbone.add_cross_section(
                    neighbour[(pos, arm_in)], j, neighbour[(pos, arm_out)],
                    [inbound[(pos, arm_in)], outbound[(pos, arm_out)]],
                )
        # Alternate streetlights across junctions
        if i % 2 == 0 or len(grid) <= 2:
            phases = [
                tuple(neighbour[(pos, arm)] for arm in _ARMS if _AXIS[arm] == axis)
                for axis in ("EW", "NS")
            ]
            backbone.add_streetlight(j, phases)

    log.info(
        "grid backbone %dx%d: %d junctions, %d roads, %d cross-sections",
        rows, cols, len(grid), len(backbone.roads), len(backbone.cross_sections),
    )
    return backbone


def _letters(i: int) -> str:
    """0 → A, 25 → Z, 26 → AA."""
    name = ""
    i += 1
    while i > 0:
        i, rem = divmod(i - 1, 26)
        name = chr(65 + rem) + name
    return name


def _is_connected(cells: Iterable[Tuple[int, int]]) -> bool:
    """True when every grid cell reaches every other through its arms."""
    remaining = set(cells)
    if len(remaining) <= 1:
        return True
    frontier = deque([remaining.pop()])
    while frontier:
        r, c = frontier.popleft()
        for ux, uy in _ARMS.values():
            other = (r + int(uy), c + int(ux))
            if other in remaining:
                remaining.discard(other)
                frontier.append(other)
    return not remaining
