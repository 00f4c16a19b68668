"""Stat - one live value bound to a StatDef."""
from __future__ import annotations

import random as _random

from tick_vitals.types import StatDef, StatState, StatType


class Stat:
    """Live value kept inside the definition's absolute band.

    Starts at *start_value* (clamped) when given, otherwise at a uniform
    draw from the baseline band using *rng*.
    """

    __slots__ = ("_definition", "_value")

    def __init__(
        self,
        definition: StatDef,
        start_value: float | None = None,
        rng: _random.Random | None = None,
    ) -> None:
        self._definition = definition
        if start_value is None:
            if rng is None:
                rng = _random.Random()
            self._value = definition.random_start_value(rng)
        else:
            self._value = definition.clamp(start_value)

    @property
    def definition(self) -> StatDef:
        return self._definition

    @property
    def stat_type(self) -> StatType:
        return self._definition.stat_type

    @property
    def display_name(self) -> str:
        return self._definition.display_name

    @property
    def value(self) -> float:
        return self._value

    @property
    def state(self) -> StatState:
        return self._definition.get_state(self._value)

    @property
    def is_good(self) -> bool:
        return self.state is StatState.GOOD

    @property
    def percentage(self) -> float:
        """Position within the absolute band, 0.0 to 1.0."""
        lo = self._definition.absolute_min
        span = self._definition.absolute_max - lo
        if span <= 0:
            return 0.0
        return (self._value - lo) / span

    def modify(self, amount: float) -> None:
        self._value = self._definition.clamp(self._value + amount)

    def set_value(self, value: float) -> None:
        self._value = self._definition.clamp(value)

    def apply_variation(self) -> None:
        if self._definition.variation_amount != 0:
            self.modify(self._definition.variation_amount)

    def __repr__(self) -> str:
        return f"Stat({self.stat_type.name}, {self._value:.2f}, {self.state.name})"
