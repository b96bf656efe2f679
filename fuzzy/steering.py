"""
fuzzy/steering.py
=================
Steering correction from the road-deviation memberships.

One rule per deviation set maps it onto a triangular steering set on the
output universe ``[-1.5, 1.5]`` (positive = steer right, negative = steer
left).  Rule activations scale their output set (product implication),
the scaled sets are summed, and the crisp correction is the centroid of
the sum (:func:`skfuzzy.defuzz`).  With equal-width output triangles this
equals the membership-weighted mean of the rule centres, so the response
falls monotonically from left to right and is exactly zero when
``middle`` is the only active set.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

import numpy as np
import skfuzzy as fuzz

from fuzzy.engine import Fuzzy
from fuzzy.road_deviation import RoadDeviation

log = logging.getLogger("fuzzy")

# Output sets: name → centre on the steering universe.
OUTPUT_CENTRES: Dict[str, float] = {
    "hard_right": 1.0,
    "right": 0.6,
    "slight_right": 0.3,
    "straight": 0.0,
    "slight_left": -0.3,
    "left": -0.6,
    "hard_left": -1.0,
}
OUTPUT_HALF_WIDTH = 0.3
UNIVERSE_LIMIT = 1.5

# Rule base: deviation set → steering set.
RULES: Tuple[Tuple[str, str], ...] = (
    ("far_left", "hard_right"),
    ("middle_left", "right"),
    ("left", "slight_right"),
    ("middle", "straight"),
    ("right", "slight_left"),
    ("middle_right", "left"),
    ("far_right", "hard_left"),
)


class SteeringController:
    """Fuzzy lane-keeping controller.

    Parameters
    ----------
    fuzzy : Fuzzy or None
        Engine to register the deviation input on.  A private engine is
        created when *None*.
    resolution : float
        Sample spacing of the output universe.
    """

    def __init__(self, fuzzy: Optional[Fuzzy] = None, resolution: float = 0.01) -> None:
        self.fuzzy = fuzzy or Fuzzy()
        self.deviation = RoadDeviation(self.fuzzy)

        samples = int(round(2.0 * UNIVERSE_LIMIT / resolution)) + 1
        self.universe = np.linspace(-UNIVERSE_LIMIT, UNIVERSE_LIMIT, samples)
        self.output_sets: Dict[str, np.ndarray] = {
            name: fuzz.trimf(
                self.universe,
                [centre - OUTPUT_HALF_WIDTH, centre, centre + OUTPUT_HALF_WIDTH],
            )
            for name, centre in OUTPUT_CENTRES.items()
        }

    def aggregate(self, deviation: float) -> np.ndarray:
        """Sum of the rule outputs, each scaled by its rule activation."""
        memberships = self.deviation.evaluate(deviation)
        aggregated = np.zeros_like(self.universe)
        for in_name, out_name in RULES:
            degree = memberships[in_name]
            if degree > 0.0:
                aggregated += degree * self.output_sets[out_name]
        return aggregated

    def correction(self, deviation: float) -> float:
        """Crisp steering correction in ``[-1, 1]`` for a normalised deviation."""
        aggregated = self.aggregate(deviation)
        if not np.any(aggregated > 0.0):
            log.debug("no active steering rule for deviation=%.3f", deviation)
            return 0.0
        return float(fuzz.defuzz(self.universe, aggregated, "centroid"))
