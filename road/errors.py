"""
road/errors.py
==============
Construction-time failures of the backbone and the geometry builder.

All of them are fatal at start-up: a malformed network must never yield
partially built geometry.
"""


class ConstructionError(ValueError):
    """Base class for malformed road-network input."""


class TooFewControlPointsError(ConstructionError):
    """A road or cross-section references fewer than two control points."""


class BoundaryMismatchError(ConstructionError):
    """Left and right border sequences have different segment counts."""


class DuplicateLocationError(ConstructionError):
    """Two locations share a name within one backbone."""


class UnknownHandleError(ConstructionError):
    """A location or control-point handle was not issued by this backbone."""


class DisconnectedGeometryError(ConstructionError):
    """A cross-section does not meet the lane it connects to."""
