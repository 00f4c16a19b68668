"""EntityStats - an agent's full set of stats, timers, age and death rules."""
from __future__ import annotations

import logging
import random as _random
from typing import Iterable, Mapping

from tick_vitals.bus import DEATH_CONDITION, STAT_CHANGED, SignalBus
from tick_vitals.stat import Stat
from tick_vitals.types import ConfigError, StatDef, StatState, StatType, default_stat_defs

logger = logging.getLogger(__name__)

SPACE_INTERVAL = 20.0
CROWDED_ABOVE = 10  # more neighbours than this shrinks Space
ISOLATED_BELOW = 2  # fewer neighbours than this grows Space


class EntityStats:
    """Owns exactly one Stat per configured StatType.

    Every mutation path publishes ``stat_changed`` first and then runs the
    death check, which publishes ``death_condition`` each time the number of
    bad stats is at least *bad_stats_for_death*. The death signal is level
    triggered: it repeats on every qualifying mutation until the caller acts.
    """

    def __init__(
        self,
        definitions: Iterable[StatDef] | None = None,
        *,
        max_lifespan: float = 300.0,
        bad_stats_for_death: int = 2,
        rng: _random.Random | None = None,
        bus: SignalBus | None = None,
        name: str = "agent",
        start_values: Mapping[StatType, float] | None = None,
    ) -> None:
        if bad_stats_for_death < 0:
            raise ConfigError(
                f"bad_stats_for_death must be >= 0, got {bad_stats_for_death}"
            )
        defs = list(definitions) if definitions is not None else []
        seen: set[StatType] = set()
        for d in defs:
            if d.stat_type in seen:
                raise ConfigError(f"Duplicate definition for {d.stat_type.name}")
            seen.add(d.stat_type)

        self._definitions: list[StatDef] = defs
        self._stats: dict[StatType, Stat] = {}
        self._timers: dict[StatType, float] = {}
        self._rng = rng if rng is not None else _random.Random()
        self.bus = bus if bus is not None else SignalBus()
        self.name = name
        self.max_lifespan = max_lifespan
        self.bad_stats_for_death = bad_stats_for_death
        self.current_age = 0.0
        self.initialize_stats(start_values)

    # --- Setup ---

    def initialize_stats(
        self, start_values: Mapping[StatType, float] | None = None
    ) -> None:
        """(Re)build every Stat from the definitions and zero all timers.

        Falls back to the built-in table when no definitions were given.
        Types missing from *start_values* start at a random baseline value.
        """
        if not self._definitions:
            self._definitions = default_stat_defs()
        start_values = start_values or {}
        stats: dict[StatType, Stat] = {}
        timers: dict[StatType, float] = {}
        for defn in self._definitions:
            stats[defn.stat_type] = Stat(
                defn, start_values.get(defn.stat_type), rng=self._rng
            )
            if defn.variation_interval > 0:
                timers[defn.stat_type] = 0.0
        self._stats = stats
        self._timers = timers

    def reset(self, start_values: Mapping[StatType, float] | None = None) -> None:
        self.current_age = 0.0
        self.initialize_stats(start_values)

    @property
    def definitions(self) -> list[StatDef]:
        return list(self._definitions)

    # --- Queries ---

    def get_stat(self, stat_type: StatType) -> Stat | None:
        return self._stats.get(stat_type)

    def get_all_stats(self) -> list[Stat]:
        return list(self._stats.values())

    def get_bad_stats(self) -> set[StatType]:
        return set(self._bad_stat_list())

    def timer(self, stat_type: StatType) -> float:
        """Elapsed seconds in *stat_type*'s variation accumulator (0 if untimed)."""
        return self._timers.get(stat_type, 0.0)

    def stat_percentage(self, stat_type: StatType) -> float:
        stat = self._stats.get(stat_type)
        return stat.percentage if stat is not None else 0.0

    def needs_resource(self, stat_type: StatType, threshold: float = 0.5) -> bool:
        return self.stat_percentage(stat_type) < threshold

    @property
    def is_alive(self) -> bool:
        health = self._stats.get(StatType.HEALTH)
        if health is None:
            return False
        return health.value > 0 and self.current_age < self.max_lifespan

    @property
    def health(self) -> float:
        """Current Health value, 0.0 when Health is not configured."""
        health = self._stats.get(StatType.HEALTH)
        return health.value if health is not None else 0.0

    @property
    def health_percentage(self) -> float:
        return self.stat_percentage(StatType.HEALTH)

    @property
    def age_percentage(self) -> float:
        if self.max_lifespan <= 0:
            return 1.0
        return self.current_age / self.max_lifespan

    # --- Mutation ---

    def modify_stat(self, stat_type: StatType, amount: float) -> None:
        """Bounded add. Unknown types are ignored."""
        stat = self._stats.get(stat_type)
        if stat is None:
            return
        stat.modify(amount)
        self._notify_changed(stat)
        self._check_death_conditions()

    def set_stat(self, stat_type: StatType, value: float) -> None:
        """Bounded set against the absolute band. Unknown types are ignored."""
        stat = self._stats.get(stat_type)
        if stat is None:
            return
        stat.set_value(value)
        self._notify_changed(stat)
        self._check_death_conditions()

    def take_damage(self, amount: float) -> None:
        self.modify_stat(StatType.HEALTH, -amount)

    def heal(self, amount: float) -> None:
        self.modify_stat(StatType.HEALTH, amount)

    def tick(self, dt: float) -> None:
        """Age by *dt* and run any variation cycle whose interval has elapsed.

        Each timed stat keeps its own accumulator; reaching the interval
        applies one variation and zeroes only that accumulator. Space is
        skipped here because it only advances through recompute_space. Any
        other stat defined with a positive interval varies here too, Health and
        Stress included.
        """
        self.current_age += dt
        for stat_type in list(self._timers):
            if stat_type is StatType.SPACE:
                continue
            stat = self._stats[stat_type]
            elapsed = self._timers[stat_type] + dt
            if elapsed >= stat.definition.variation_interval:
                stat.apply_variation()
                self._notify_changed(stat)
                elapsed = 0.0
            self._timers[stat_type] = elapsed
        self._check_death_conditions()

    def recompute_space(self, nearby_count: int, dt: float) -> None:
        """Adjust Space from a caller-supplied neighbour count.

        Runs once per Space interval: crowding lowers Space by one, isolation
        raises it by one, anything in between leaves it alone.
        """
        stat = self._stats.get(StatType.SPACE)
        if stat is None:
            return
        interval = stat.definition.variation_interval or SPACE_INTERVAL
        elapsed = self._timers.get(StatType.SPACE, 0.0) + dt
        if elapsed < interval:
            self._timers[StatType.SPACE] = elapsed
            return

        before = stat.value
        if nearby_count > CROWDED_ABOVE:
            stat.modify(-1.0)
        elif nearby_count < ISOLATED_BELOW:
            stat.modify(1.0)
        self._timers[StatType.SPACE] = 0.0
        if stat.value != before:
            self._notify_changed(stat)
            self._check_death_conditions()

    # --- Internals ---

    def _bad_stat_list(self) -> list[StatType]:
        return [t for t, s in self._stats.items() if s.state is StatState.BAD]

    def _notify_changed(self, stat: Stat) -> None:
        self.bus.publish(
            STAT_CHANGED, stats=self, stat_type=stat.stat_type, value=stat.value
        )

    def _check_death_conditions(self) -> None:
        bad = self._bad_stat_list()
        if len(bad) >= self.bad_stats_for_death:
            logger.debug(
                f"{self.name}: death condition met "
                f"({', '.join(t.name for t in bad) or 'threshold 0'})"
            )
            self.bus.publish(DEATH_CONDITION, stats=self, bad_stats=bad)

    def __repr__(self) -> str:
        values = ", ".join(f"{t.name}={s.value:.1f}" for t, s in self._stats.items())
        return f"EntityStats({self.name!r}, age={self.current_age:.1f}, {values})"
