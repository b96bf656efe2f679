"""
fuzzy — Fuzzy inference
=======================

Modules
-------
engine
    :class:`Fuzzy` registry of inputs and membership functions.
road_deviation
    :class:`RoadDeviation` seven-set partition of lateral lane deviation.
steering
    :class:`SteeringController` rule base and centroid defuzzification.
"""

from .engine import Fuzzy, FuzzyError, FuzzyInput, FuzzySet
from .road_deviation import RoadDeviation
from .steering import SteeringController

__all__ = [
    "Fuzzy",
    "FuzzyError",
    "FuzzyInput",
    "FuzzySet",
    "RoadDeviation",
    "SteeringController",
]
