"""Environment coordinator configuration dataclass."""
from __future__ import annotations

from dataclasses import dataclass

from tick_vitals.types import ConfigError


@dataclass(frozen=True)
class EnvironmentConfig:
    """Immutable configuration for the shared environment process.

    Attributes:
        initial_temperature: Starting global temperature, clamped to [0, 100].
        initial_environment: Starting global environment quality, clamped to [0, 100].
        temperature_variation: Half-width of the per-cycle temperature draw.
        environment_variation: Half-width of the per-cycle environment draw.
        update_interval: Seconds of simulated time between cycles.
        convergence_rate: Fraction of the agent-to-global gap closed per cycle.
        variation_scale: Multiplier applied to each random draw.
        food_stress: Stress added per cycle while Food is bad.
        water_stress: Stress added per cycle while Water is bad.
        space_stress: Stress added per cycle while Space is bad.
        stress_relief: Stress removed per cycle while Food, Water and Space are all good.
    """

    initial_temperature: float = 75.0
    initial_environment: float = 80.0
    temperature_variation: float = 5.0
    environment_variation: float = 10.0
    update_interval: float = 1.0
    convergence_rate: float = 0.1
    variation_scale: float = 0.1
    food_stress: float = 0.5
    water_stress: float = 0.5
    space_stress: float = 0.3
    stress_relief: float = 0.1

    def __post_init__(self) -> None:
        if self.update_interval <= 0:
            raise ConfigError(f"update_interval must be > 0, got {self.update_interval}")
        if self.temperature_variation < 0 or self.environment_variation < 0:
            raise ConfigError("variation half-widths must be >= 0")
        if not 0.0 <= self.convergence_rate <= 1.0:
            raise ConfigError(
                f"convergence_rate must be in [0, 1], got {self.convergence_rate}"
            )
