"""VitalsEngine - fixed-step host that ticks agents and the environment."""
from __future__ import annotations

import logging
import os
import random
from typing import Any, Callable, Iterable, Mapping

from tick_vitals.bus import AGENT_DIED, DEATH_CONDITION, SignalBus
from tick_vitals.config import EnvironmentConfig
from tick_vitals.entity import EntityStats
from tick_vitals.environment import EnvironmentCoordinator
from tick_vitals.types import StatDef, StatType

logger = logging.getLogger(__name__)

NearbyFn = Callable[[EntityStats], int]
DeathHook = Callable[["VitalsEngine", EntityStats, str], None]
Hook = Callable[["VitalsEngine"], None]


class VitalsEngine:
    def __init__(
        self,
        tps: int = 20,
        seed: int | None = None,
        config: EnvironmentConfig | None = None,
        nearby: NearbyFn | None = None,
    ) -> None:
        if tps <= 0:
            raise ValueError("tps must be positive")
        self._tps = tps
        self._dt = 1.0 / tps
        self._tick_number = 0
        self._time_scale = 1.0

        if seed is None:
            seed = int.from_bytes(os.urandom(8))
        self._seed = seed
        self._rng = random.Random(seed)

        self.bus = SignalBus()
        self._coordinator = EnvironmentCoordinator(config, rng=self._rng, bus=self.bus)
        self._nearby = nearby
        self._handles: dict[int, int] = {}  # id(stats) -> coordinator handle
        self._agents: list[EntityStats] = []
        self._flagged: set[int] = set()
        self._death_hooks: list[DeathHook] = []
        self._start_hooks: list[Hook] = []
        self._stop_hooks: list[Hook] = []
        self._spawned = 0
        self.bus.subscribe(DEATH_CONDITION, self._on_death_condition)

    @property
    def coordinator(self) -> EnvironmentCoordinator:
        return self._coordinator

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def tps(self) -> int:
        return self._tps

    @property
    def dt(self) -> float:
        return self._dt

    @property
    def tick_number(self) -> int:
        return self._tick_number

    @property
    def elapsed(self) -> float:
        return self._tick_number * self._dt

    @property
    def time_scale(self) -> float:
        return self._time_scale

    @time_scale.setter
    def time_scale(self, value: float) -> None:
        if value < 0:
            raise ValueError("time_scale must be >= 0")
        self._time_scale = value

    @property
    def agents(self) -> list[EntityStats]:
        return list(self._agents)

    def on_death(self, hook: DeathHook) -> None:
        self._death_hooks.append(hook)

    def on_start(self, hook: Hook) -> None:
        self._start_hooks.append(hook)

    def on_stop(self, hook: Hook) -> None:
        self._stop_hooks.append(hook)

    # --- Population ---

    def spawn(
        self,
        definitions: Iterable[StatDef] | None = None,
        *,
        name: str | None = None,
        start_values: Mapping[StatType, float] | None = None,
        max_lifespan: float = 300.0,
        bad_stats_for_death: int = 2,
    ) -> EntityStats:
        """Create an agent on the engine's bus and RNG and start driving it."""
        if name is None:
            name = f"agent_{self._spawned}"
        self._spawned += 1
        stats = EntityStats(
            definitions, rng=self._rng, bus=self.bus, name=name,
            start_values=start_values, max_lifespan=max_lifespan,
            bad_stats_for_death=bad_stats_for_death,
        )
        self._agents.append(stats)
        self._handles[id(stats)] = self._coordinator.register(stats)
        return stats

    def despawn(self, stats: EntityStats) -> None:
        handle = self._handles.pop(id(stats), None)
        if handle is None:
            return
        self._coordinator.unregister(handle)
        self._agents = [a for a in self._agents if a is not stats]
        self._flagged.discard(id(stats))

    # --- Loop ---

    def _on_death_condition(self, signal_name: str, data: dict[str, Any]) -> None:
        stats = data["stats"]
        if id(stats) in self._handles:
            self._flagged.add(id(stats))

    def _reap(self) -> None:
        for stats in list(self._agents):
            if id(stats) not in self._handles:
                continue  # despawned by an earlier hook
            if id(stats) in self._flagged:
                reason = "death_condition"
            elif not stats.is_alive:
                reason = "old_age" if stats.current_age >= stats.max_lifespan else "health"
            else:
                continue
            logger.info(
                f"{stats.name} died ({reason}) at age {stats.current_age:.1f}s, "
                f"health {stats.health:.0f}"
            )
            for hook in self._death_hooks:
                hook(self, stats, reason)
            self.bus.publish(AGENT_DIED, stats=stats, reason=reason)
            self.despawn(stats)

    def step(self) -> None:
        self._tick_number += 1
        dt = self._dt * self._time_scale
        for stats in list(self._agents):
            if not stats.is_alive:
                continue
            stats.tick(dt)
            if self._nearby is not None:
                stats.recompute_space(self._nearby(stats), dt)
        self._coordinator.update(dt)
        self._reap()

    def run(self, n: int) -> None:
        for hook in self._start_hooks:
            hook(self)
        for _ in range(n):
            self.step()
        for hook in self._stop_hooks:
            hook(self)
