"""tick-vitals - Per-entity vital statistics and a shared environment for the tick engine."""
from __future__ import annotations

from tick_vitals.bus import (
    AGENT_DIED,
    DEATH_CONDITION,
    GLOBAL_ENVIRONMENT_CHANGED,
    GLOBAL_TEMPERATURE_CHANGED,
    STAT_CHANGED,
    SignalBus,
    SignalDepthError,
)
from tick_vitals.config import EnvironmentConfig
from tick_vitals.engine import VitalsEngine
from tick_vitals.entity import EntityStats
from tick_vitals.environment import EnvironmentCoordinator
from tick_vitals.stat import Stat
from tick_vitals.types import ConfigError, StatDef, StatState, StatType, default_stat_defs

__all__ = [
    "StatType",
    "StatState",
    "StatDef",
    "Stat",
    "EntityStats",
    "EnvironmentCoordinator",
    "EnvironmentConfig",
    "VitalsEngine",
    "SignalBus",
    "SignalDepthError",
    "ConfigError",
    "default_stat_defs",
    "STAT_CHANGED",
    "DEATH_CONDITION",
    "GLOBAL_TEMPERATURE_CHANGED",
    "GLOBAL_ENVIRONMENT_CHANGED",
    "AGENT_DIED",
]
