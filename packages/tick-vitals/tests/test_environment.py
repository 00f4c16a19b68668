"""Tests for EnvironmentCoordinator and EnvironmentConfig."""
from __future__ import annotations

import random

import pytest
from tick_vitals import (
    GLOBAL_ENVIRONMENT_CHANGED,
    GLOBAL_TEMPERATURE_CHANGED,
    STAT_CHANGED,
    ConfigError,
    EntityStats,
    EnvironmentConfig,
    EnvironmentCoordinator,
    StatDef,
    StatType,
)

ALL_GOOD = {t: 75.0 for t in StatType}
STILL = EnvironmentConfig(temperature_variation=0.0, environment_variation=0.0)


def make_agent() -> EntityStats:
    values = dict(ALL_GOOD)
    values[StatType.ENVIRONMENT] = 80.0
    return EntityStats(start_values=values, rng=random.Random(0))


def make_coordinator(config: EnvironmentConfig = STILL, seed: int = 1) -> EnvironmentCoordinator:
    return EnvironmentCoordinator(config, rng=random.Random(seed))


class TestConfig:
    def test_defaults(self) -> None:
        cfg = EnvironmentConfig()
        assert cfg.initial_temperature == 75.0
        assert cfg.initial_environment == 80.0
        assert cfg.temperature_variation == 5.0
        assert cfg.environment_variation == 10.0
        assert cfg.update_interval == 1.0
        assert (cfg.food_stress, cfg.water_stress, cfg.space_stress) == (0.5, 0.5, 0.3)
        assert cfg.stress_relief == 0.1

    def test_bad_interval(self) -> None:
        with pytest.raises(ConfigError, match="update_interval"):
            EnvironmentConfig(update_interval=0.0)

    def test_bad_variation(self) -> None:
        with pytest.raises(ConfigError):
            EnvironmentConfig(temperature_variation=-1.0)

    def test_bad_convergence(self) -> None:
        with pytest.raises(ConfigError, match="convergence_rate"):
            EnvironmentConfig(convergence_rate=1.5)


class TestGlobals:
    def test_initial_values(self) -> None:
        coord = make_coordinator()
        assert coord.global_temperature == 75.0
        assert coord.global_environment == 80.0

    def test_initial_values_clamped(self) -> None:
        coord = make_coordinator(EnvironmentConfig(initial_temperature=140.0, initial_environment=-3.0))
        assert coord.global_temperature == 100.0
        assert coord.global_environment == 0.0

    def test_setters_clamp(self) -> None:
        coord = make_coordinator()
        coord.set_global_temperature(150.0)
        coord.set_global_environment(-20.0)
        assert coord.global_temperature == 100.0
        assert coord.global_environment == 0.0

    def test_drift_bounded_per_cycle(self) -> None:
        coord = make_coordinator(EnvironmentConfig(), seed=7)
        coord.cycle()
        assert abs(coord.global_temperature - 75.0) <= 0.5
        assert abs(coord.global_environment - 80.0) <= 1.0

    def test_drift_stays_in_range(self) -> None:
        cfg = EnvironmentConfig(initial_temperature=99.0, temperature_variation=100.0,
                                environment_variation=100.0)
        coord = make_coordinator(cfg, seed=3)
        for _ in range(200):
            coord.cycle()
            assert 0.0 <= coord.global_temperature <= 100.0
            assert 0.0 <= coord.global_environment <= 100.0

    def test_same_seed_same_drift(self) -> None:
        a = make_coordinator(EnvironmentConfig(), seed=12)
        b = make_coordinator(EnvironmentConfig(), seed=12)
        for _ in range(10):
            a.cycle()
            b.cycle()
        assert a.global_temperature == b.global_temperature
        assert a.global_environment == b.global_environment

    def test_signals_once_per_cycle_without_agents(self) -> None:
        coord = make_coordinator(EnvironmentConfig(), seed=2)
        temps, envs = [], []
        coord.bus.subscribe(GLOBAL_TEMPERATURE_CHANGED, lambda n, d: temps.append(d["value"]))
        coord.bus.subscribe(GLOBAL_ENVIRONMENT_CHANGED, lambda n, d: envs.append(d["value"]))
        coord.cycle()
        coord.cycle()
        assert len(temps) == 2 and len(envs) == 2
        assert temps[-1] == coord.global_temperature
        assert envs[-1] == coord.global_environment


class TestRegistration:
    def test_register_and_unregister(self) -> None:
        coord = make_coordinator()
        a, b = make_agent(), make_agent()
        ha = coord.register(a)
        hb = coord.register(b)
        assert ha != hb
        assert coord.agents() == [a, b]
        coord.unregister(ha)
        assert coord.agents() == [b]
        assert len(coord) == 1

    def test_unregister_unknown_is_noop(self) -> None:
        coord = make_coordinator()
        coord.unregister(99)
        assert len(coord) == 0

    def test_refresh_replaces(self) -> None:
        coord = make_coordinator()
        coord.register(make_agent())
        fresh = [make_agent(), make_agent(), make_agent()]
        handles = coord.refresh(fresh)
        assert len(handles) == 3
        assert coord.agents() == fresh

    def test_register_twice_keeps_one_entry(self) -> None:
        coord = make_coordinator()
        agent = make_agent()
        first = coord.register(agent)
        assert coord.register(agent) == first
        assert len(coord) == 1
        coord.set_global_temperature(100.0)
        agent.set_stat(StatType.TEMPERATURE, 50.0)
        coord.cycle()
        assert agent.get_stat(StatType.TEMPERATURE).value == pytest.approx(55.0)

    def test_unregister_then_register_gets_new_handle(self) -> None:
        coord = make_coordinator()
        agent = make_agent()
        first = coord.register(agent)
        coord.unregister(first)
        assert coord.register(agent) != first
        assert coord.agents() == [agent]

    def test_refresh_skips_duplicates(self) -> None:
        coord = make_coordinator()
        agent = make_agent()
        handles = coord.refresh([agent, agent])
        assert handles[0] == handles[1]
        assert coord.agents() == [agent]


class TestConvergence:
    def test_moves_up_toward_target(self) -> None:
        coord = make_coordinator()
        agent = make_agent()
        agent.set_stat(StatType.TEMPERATURE, 50.0)
        agent.set_stat(StatType.ENVIRONMENT, 60.0)
        coord.register(agent)
        coord.cycle()
        assert agent.get_stat(StatType.TEMPERATURE).value == pytest.approx(52.5)
        assert agent.get_stat(StatType.ENVIRONMENT).value == pytest.approx(62.0)

    def test_moves_down_toward_target(self) -> None:
        coord = make_coordinator()
        agent = make_agent()
        agent.set_stat(StatType.TEMPERATURE, 90.0)
        coord.register(agent)
        coord.cycle()
        assert agent.get_stat(StatType.TEMPERATURE).value == pytest.approx(88.5)

    def test_zero_gap_zero_delta(self) -> None:
        coord = make_coordinator()
        agent = make_agent()
        coord.register(agent)
        coord.cycle()
        assert agent.get_stat(StatType.TEMPERATURE).value == 75.0
        assert agent.get_stat(StatType.ENVIRONMENT).value == 80.0

    def test_monotonic_without_overshoot(self) -> None:
        coord = make_coordinator()
        agent = make_agent()
        agent.set_stat(StatType.TEMPERATURE, 10.0)
        coord.register(agent)
        previous = 10.0
        for _ in range(60):
            coord.cycle()
            current = agent.get_stat(StatType.TEMPERATURE).value
            assert previous < current <= 75.0
            previous = current

    def test_changes_go_through_notifications(self) -> None:
        coord = make_coordinator()
        agent = make_agent()
        agent.set_stat(StatType.TEMPERATURE, 50.0)
        changed = []
        agent.bus.subscribe(STAT_CHANGED, lambda n, d: changed.append(d["stat_type"]))
        coord.register(agent)
        coord.cycle()
        assert StatType.TEMPERATURE in changed
        assert StatType.ENVIRONMENT in changed

    def test_missing_stats_skipped(self) -> None:
        coord = make_coordinator()
        agent = EntityStats([StatDef(StatType.HEALTH)], start_values={StatType.HEALTH: 90.0})
        coord.register(agent)
        coord.cycle()
        assert agent.health == 90.0


class TestStress:
    def test_relief_when_all_good(self) -> None:
        coord = make_coordinator()
        agent = make_agent()
        agent.set_stat(StatType.STRESS, 60.0)
        coord.register(agent)
        coord.cycle()
        assert agent.get_stat(StatType.STRESS).value == pytest.approx(59.9)

    @pytest.mark.parametrize(
        "bad, expected",
        [
            ((StatType.FOOD,), 60.5),
            ((StatType.WATER,), 60.5),
            ((StatType.SPACE,), 60.3),
            ((StatType.FOOD, StatType.WATER), 61.0),
            ((StatType.FOOD, StatType.WATER, StatType.SPACE), 61.3),
        ],
    )
    def test_penalties(self, bad, expected) -> None:
        coord = make_coordinator()
        agent = make_agent()
        agent.bad_stats_for_death = 10
        for stat_type in bad:
            agent.set_stat(stat_type, 20.0)
        agent.set_stat(StatType.STRESS, 60.0)
        coord.register(agent)
        coord.cycle()
        assert agent.get_stat(StatType.STRESS).value == pytest.approx(expected)

    def test_no_relief_without_space_stat(self) -> None:
        defs = [StatDef(StatType.HEALTH), StatDef(StatType.FOOD),
                StatDef(StatType.WATER), StatDef(StatType.STRESS)]
        agent = EntityStats(defs, start_values={t: 75.0 for t in StatType})
        coord = make_coordinator()
        coord.register(agent)
        coord.cycle()
        assert agent.get_stat(StatType.STRESS).value == 75.0

    def test_no_stress_stat_is_fine(self) -> None:
        defs = [StatDef(StatType.HEALTH), StatDef(StatType.FOOD)]
        agent = EntityStats(defs, start_values={StatType.HEALTH: 80.0, StatType.FOOD: 10.0})
        coord = make_coordinator()
        coord.register(agent)
        coord.cycle()
        assert agent.get_stat(StatType.FOOD).value == 10.0


class TestSkipping:
    def test_dead_agents_skipped_but_kept(self) -> None:
        coord = make_coordinator()
        agent = make_agent()
        agent.set_stat(StatType.TEMPERATURE, 50.0)
        agent.set_stat(StatType.HEALTH, 0.0)
        coord.register(agent)
        coord.cycle()
        assert agent.get_stat(StatType.TEMPERATURE).value == 50.0
        assert coord.agents() == [agent]

    def test_old_agents_skipped(self) -> None:
        coord = make_coordinator()
        agent = EntityStats(start_values=ALL_GOOD, max_lifespan=1.0)
        agent.tick(1.0)
        agent.set_stat(StatType.STRESS, 60.0)
        coord.register(agent)
        coord.cycle()
        assert agent.get_stat(StatType.STRESS).value == 60.0


class TestUpdate:
    def test_runs_on_interval(self) -> None:
        coord = make_coordinator()
        assert coord.update(0.5) is False
        assert coord.cycles == 0
        assert coord.update(0.5) is True
        assert coord.cycles == 1

    def test_resets_after_cycle(self) -> None:
        coord = make_coordinator(EnvironmentConfig(update_interval=2.0))
        assert coord.update(3.0) is True
        assert coord.update(1.0) is False
        assert coord.update(1.0) is True
        assert coord.cycles == 2
