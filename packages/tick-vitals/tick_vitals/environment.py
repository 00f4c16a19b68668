"""EnvironmentCoordinator - shared ambient signals pushed into every agent."""
from __future__ import annotations

import logging
import random as _random
from typing import Iterable

from tick_vitals.bus import (
    GLOBAL_ENVIRONMENT_CHANGED,
    GLOBAL_TEMPERATURE_CHANGED,
    SignalBus,
)
from tick_vitals.config import EnvironmentConfig
from tick_vitals.entity import EntityStats
from tick_vitals.types import StatState, StatType

logger = logging.getLogger(__name__)

AMBIENT_MIN = 0.0
AMBIENT_MAX = 100.0


def _clamp_ambient(value: float) -> float:
    return max(AMBIENT_MIN, min(value, AMBIENT_MAX))


class EnvironmentCoordinator:
    """Drifts global temperature and environment, then nudges each live agent.

    Agents are held by explicit registration. Dead agents stay registered but
    are skipped; removing them is the caller's job. Registration changes are
    expected between cycles, never from inside one.
    """

    def __init__(
        self,
        config: EnvironmentConfig | None = None,
        *,
        rng: _random.Random | None = None,
        bus: SignalBus | None = None,
    ) -> None:
        self._config = config if config is not None else EnvironmentConfig()
        self._rng = rng if rng is not None else _random.Random()
        self.bus = bus if bus is not None else SignalBus()
        self._temperature = _clamp_ambient(self._config.initial_temperature)
        self._environment = _clamp_ambient(self._config.initial_environment)
        self._agents: dict[int, EntityStats] = {}
        self._handles: dict[int, int] = {}  # id(stats) -> handle
        self._next_handle = 0
        self._elapsed = 0.0
        self._cycles = 0

    @property
    def config(self) -> EnvironmentConfig:
        return self._config

    @property
    def global_temperature(self) -> float:
        return self._temperature

    @property
    def global_environment(self) -> float:
        return self._environment

    @property
    def cycles(self) -> int:
        return self._cycles

    def set_global_temperature(self, value: float) -> None:
        self._temperature = _clamp_ambient(value)

    def set_global_environment(self, value: float) -> None:
        self._environment = _clamp_ambient(value)

    # --- Registration ---

    def register(self, stats: EntityStats) -> int:
        """Start driving *stats*. Returns a handle for unregister().

        Registering an agent that is already held returns its existing handle.
        """
        handle = self._handles.get(id(stats))
        if handle is not None:
            return handle
        handle = self._next_handle
        self._next_handle += 1
        self._agents[handle] = stats
        self._handles[id(stats)] = handle
        logger.debug(f"Registered {stats.name} as agent {handle}")
        return handle

    def unregister(self, handle: int) -> None:
        stats = self._agents.pop(handle, None)
        if stats is not None:
            del self._handles[id(stats)]
            logger.debug(f"Unregistered agent {handle} ({stats.name})")

    def refresh(self, agents: Iterable[EntityStats]) -> list[int]:
        """Replace the whole agent collection; returns one handle per agent given.

        An agent listed twice is held once and gets the same handle both times.
        """
        self._agents.clear()
        self._handles.clear()
        return [self.register(stats) for stats in agents]

    def agents(self) -> list[EntityStats]:
        return list(self._agents.values())

    def __len__(self) -> int:
        return len(self._agents)

    # --- Cycle ---

    def update(self, dt: float) -> bool:
        """Accumulate *dt*; run a cycle when the update interval has elapsed."""
        self._elapsed += dt
        if self._elapsed < self._config.update_interval:
            return False
        self._elapsed = 0.0
        self.cycle()
        return True

    def cycle(self) -> None:
        cfg = self._config
        self._temperature = _clamp_ambient(
            self._temperature
            + self._rng.uniform(-cfg.temperature_variation, cfg.temperature_variation)
            * cfg.variation_scale
        )
        self._environment = _clamp_ambient(
            self._environment
            + self._rng.uniform(-cfg.environment_variation, cfg.environment_variation)
            * cfg.variation_scale
        )

        for stats in list(self._agents.values()):
            if not stats.is_alive:
                continue
            self._converge(stats, StatType.TEMPERATURE, self._temperature)
            self._converge(stats, StatType.ENVIRONMENT, self._environment)
            self._apply_stress(stats)

        self._cycles += 1
        logger.debug(
            f"Environment cycle {self._cycles}: temperature={self._temperature:.2f} "
            f"environment={self._environment:.2f} agents={len(self._agents)}"
        )
        self.bus.publish(GLOBAL_TEMPERATURE_CHANGED, value=self._temperature)
        self.bus.publish(GLOBAL_ENVIRONMENT_CHANGED, value=self._environment)

    def _converge(self, stats: EntityStats, stat_type: StatType, target: float) -> None:
        stat = stats.get_stat(stat_type)
        if stat is None:
            return
        stats.modify_stat(stat_type, (target - stat.value) * self._config.convergence_rate)

    def _apply_stress(self, stats: EntityStats) -> None:
        if stats.get_stat(StatType.STRESS) is None:
            return
        cfg = self._config
        weights = (
            (StatType.FOOD, cfg.food_stress),
            (StatType.WATER, cfg.water_stress),
            (StatType.SPACE, cfg.space_stress),
        )
        delta = 0.0
        all_good = True
        for stat_type, weight in weights:
            stat = stats.get_stat(stat_type)
            if stat is None:
                all_good = False
                continue
            if stat.state is StatState.BAD:
                delta += weight
                all_good = False
        if all_good:
            delta -= cfg.stress_relief
        if delta != 0:
            stats.modify_stat(StatType.STRESS, delta)
