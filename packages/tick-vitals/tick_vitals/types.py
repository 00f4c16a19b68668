"""Core data types for per-entity vital statistics."""
from __future__ import annotations

import random as _random
from dataclasses import dataclass
from enum import Enum


class StatType(Enum):
    HEALTH = "health"
    FOOD = "food"
    WATER = "water"
    STRESS = "stress"
    ENVIRONMENT = "environment"
    TEMPERATURE = "temperature"
    SPACE = "space"


class StatState(Enum):
    GOOD = "good"  # inside the baseline band
    BAD = "bad"


class ConfigError(ValueError):
    """Raised when a stat definition or engine configuration is invalid."""


@dataclass(frozen=True)
class StatDef:
    """Immutable rules for one stat type.

    Attributes:
        stat_type: Which stat these rules apply to.
        baseline_min: Lower edge of the good-state band (inclusive).
        baseline_max: Upper edge of the good-state band (inclusive).
        absolute_min: Hard lower clamp.
        absolute_max: Hard upper clamp.
        variation_amount: Signed delta applied per variation cycle.
        variation_interval: Seconds between cycles (0 for no automatic variation).
        affected_by_external: Advisory only, writes are never gated on it.
        display_name: Human-readable label (defaults to the type name).
    """

    stat_type: StatType
    baseline_min: float = 50.0
    baseline_max: float = 100.0
    absolute_min: float = 0.0
    absolute_max: float = 100.0
    variation_amount: float = 0.0
    variation_interval: float = 0.0
    affected_by_external: bool = False
    display_name: str = ""

    def __post_init__(self) -> None:
        if self.baseline_min > self.baseline_max:
            raise ConfigError(
                f"{self.stat_type.name}: baseline_min {self.baseline_min} > "
                f"baseline_max {self.baseline_max}"
            )
        if self.absolute_min > self.absolute_max:
            raise ConfigError(
                f"{self.stat_type.name}: absolute_min {self.absolute_min} > "
                f"absolute_max {self.absolute_max}"
            )
        if self.baseline_min < self.absolute_min or self.baseline_max > self.absolute_max:
            raise ConfigError(
                f"{self.stat_type.name}: baseline band must lie inside the absolute band"
            )
        if self.variation_interval < 0:
            raise ConfigError(
                f"{self.stat_type.name}: variation_interval must be >= 0, "
                f"got {self.variation_interval}"
            )
        if not self.display_name:
            object.__setattr__(self, "display_name", self.stat_type.name.title())

    def get_state(self, value: float) -> StatState:
        if self.baseline_min <= value <= self.baseline_max:
            return StatState.GOOD
        return StatState.BAD

    def clamp(self, value: float) -> float:
        return max(self.absolute_min, min(value, self.absolute_max))

    def random_start_value(self, rng: _random.Random) -> float:
        """Uniform draw from the baseline band, so new stats start good."""
        return rng.uniform(self.baseline_min, self.baseline_max)


def default_stat_defs() -> list[StatDef]:
    """The built-in table used when an entity is given no definitions.

    Space carries an interval but no passive amount: the interval only gates
    how often the crowding calculation runs.
    """
    return [
        StatDef(StatType.HEALTH),
        StatDef(StatType.FOOD, variation_amount=-1.0, variation_interval=10.0),
        StatDef(StatType.WATER, variation_amount=-1.0, variation_interval=5.0),
        StatDef(StatType.STRESS, affected_by_external=True),
        StatDef(StatType.ENVIRONMENT, affected_by_external=True),
        StatDef(StatType.TEMPERATURE, affected_by_external=True),
        StatDef(StatType.SPACE, variation_interval=20.0),
    ]
