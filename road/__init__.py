"""
road — Road network and geometry
================================

Modules
-------
backbone
    :class:`Backbone` arena of locations, control points, roads,
    cross-sections and streetlights; default and grid layouts.
bezier
    :class:`Bezier` cubic segments and vector helpers.
geometry
    :class:`RoadGeometry` lanes and cross-sections with arc-length tables.
planner
    :func:`find_path` shortest route between two snapped points.
renderer
    :class:`RoadMesh` triangle / border / chosen-path index lists.
errors
    :class:`ConstructionError` and its subclasses.
"""

from .backbone import Backbone, default_backbone, grid_backbone
from .bezier import Bezier
from .errors import (
    BoundaryMismatchError,
    ConstructionError,
    DisconnectedGeometryError,
    DuplicateLocationError,
    TooFewControlPointsError,
    UnknownHandleError,
)
from .geometry import CrossSectionGeometry, Lane, RoadGeometry, SegmentKey
from .planner import Path, find_path
from .renderer import RoadMesh

__all__ = [
    "Backbone",
    "default_backbone",
    "grid_backbone",
    "Bezier",
    "BoundaryMismatchError",
    "ConstructionError",
    "DisconnectedGeometryError",
    "DuplicateLocationError",
    "TooFewControlPointsError",
    "UnknownHandleError",
    "CrossSectionGeometry",
    "Lane",
    "RoadGeometry",
    "SegmentKey",
    "Path",
    "find_path",
    "RoadMesh",
]
