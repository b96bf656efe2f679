"""
fuzzy/engine.py
===============
Generic fuzzy-membership engine.

A :class:`Fuzzy` instance owns a flat list of scalar inputs, each with a
declared ``[min, max]`` range, and a flat list of named membership
functions ("fuzzy sets") attached to those inputs.  Callers hold the
lightweight :class:`FuzzyInput` / :class:`FuzzySet` handles returned on
registration; a handle is only valid against the engine that issued it.

The engine knows nothing about roads or cars — see
:mod:`fuzzy.road_deviation` for the domain wiring.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

MembershipFn = Callable[[float], float]

_ENGINE_IDS = itertools.count(1)


class FuzzyError(ValueError):
    """Invalid input range, or a handle the engine did not issue."""


@dataclass(frozen=True)
class FuzzyInput:
    """Handle to one continuous scalar domain."""

    engine_id: int
    index: int


@dataclass(frozen=True)
class FuzzySet:
    """Handle to one membership function attached to a :class:`FuzzyInput`."""

    engine_id: int
    index: int
    input: FuzzyInput
    name: str = ""


@dataclass(frozen=True)
class _InputSpec:
    min_value: float
    max_value: float

    def clamp(self, value: float) -> float:
        return max(self.min_value, min(self.max_value, float(value)))


class Fuzzy:
    """Registry of fuzzy inputs and their membership functions.

    Example
    -------
    >>> fuzzy = Fuzzy()
    >>> x = fuzzy.add_input(0.0, 1.0)
    >>> low = fuzzy.add_input_set(x, lambda v: 1.0 - v)
    >>> fuzzy.membership(low, 0.25)
    0.75
    """

    def __init__(self) -> None:
        self._id = next(_ENGINE_IDS)
        self._inputs: List[_InputSpec] = []
        self._sets: List[Tuple[FuzzySet, MembershipFn]] = []

    # ── registration ──────────────────────────────────────────────────────

    def add_input(self, min_value: float, max_value: float) -> FuzzyInput:
        """Register a scalar domain ``[min_value, max_value]``.

        Raises
        ------
        FuzzyError
            If ``min_value >= max_value``.
        """
        if not min_value < max_value:
            raise FuzzyError(
                f"input range must satisfy min < max, got [{min_value}, {max_value}]"
            )
        self._inputs.append(_InputSpec(float(min_value), float(max_value)))
        return FuzzyInput(engine_id=self._id, index=len(self._inputs) - 1)

    def add_input_set(
        self,
        input: FuzzyInput,
        membership_fn: MembershipFn,
        name: str = "",
    ) -> FuzzySet:
        """Attach *membership_fn* to *input* and return the set handle."""
        self._check_input(input)
        handle = FuzzySet(
            engine_id=self._id,
            index=len(self._sets),
            input=input,
            name=name,
        )
        self._sets.append((handle, membership_fn))
        return handle

    # ── evaluation ────────────────────────────────────────────────────────

    def membership(self, fuzzy_set: FuzzySet, value: float) -> float:
        """Degree of membership of *value* in *fuzzy_set*, in ``[0, 1]``.

        *value* is clamped to the input's declared range first, so
        out-of-range inputs saturate instead of failing.
        """
        handle, fn = self._lookup_set(fuzzy_set)
        clamped = self._inputs[handle.input.index].clamp(value)
        return max(0.0, min(1.0, float(fn(clamped))))

    def memberships(self, input: FuzzyInput, value: float) -> Dict[FuzzySet, float]:
        """Evaluate every set attached to *input* for one value."""
        self._check_input(input)
        return {
            handle: self.membership(handle, value)
            for handle, _fn in self._sets
            if handle.input == input
        }

    def input_range(self, input: FuzzyInput) -> Tuple[float, float]:
        self._check_input(input)
        spec = self._inputs[input.index]
        return spec.min_value, spec.max_value

    def sets_of(self, input: FuzzyInput) -> List[FuzzySet]:
        self._check_input(input)
        return [handle for handle, _fn in self._sets if handle.input == input]

    # ── handle validation ─────────────────────────────────────────────────

    def _check_input(self, input: FuzzyInput) -> None:
        if not isinstance(input, FuzzyInput):
            raise FuzzyError(f"not an input handle: {input!r}")
        if input.engine_id != self._id:
            raise FuzzyError(f"input handle belongs to another engine: {input!r}")
        if not 0 <= input.index < len(self._inputs):
            raise FuzzyError(f"unknown input handle: {input!r}")

    def _lookup_set(self, fuzzy_set: FuzzySet) -> Tuple[FuzzySet, MembershipFn]:
        if not isinstance(fuzzy_set, FuzzySet):
            raise FuzzyError(f"not a set handle: {fuzzy_set!r}")
        if fuzzy_set.engine_id != self._id:
            raise FuzzyError(f"set handle belongs to another engine: {fuzzy_set!r}")
        if not 0 <= fuzzy_set.index < len(self._sets):
            raise FuzzyError(f"unknown set handle: {fuzzy_set!r}")
        return self._sets[fuzzy_set.index]
