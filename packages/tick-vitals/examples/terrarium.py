"""Demo scenario - a small terrarium of agents living off their vitals.

Agents drink and eat from a shared supply, drift with the ambient
temperature and environment, and die when two stats go bad at once or
when they reach old age. Uses a fixed seed so every run is identical.

Run: python packages/tick-vitals/examples/terrarium.py [--seed N] [--ticks N]
"""

import argparse
import logging

from tick_vitals import EntityStats, StatType, VitalsEngine


# ---------------------------------------------------------------------------
# Behaviour
# ---------------------------------------------------------------------------

def forage(engine: VitalsEngine) -> None:
    for stats in engine.agents:
        if stats.needs_resource(StatType.WATER, 0.55):
            stats.modify_stat(StatType.WATER, 5.0)
        if engine.tick_number % 3 == 0 and stats.needs_resource(StatType.FOOD, 0.55):
            stats.modify_stat(StatType.FOOD, 3.0)


def census(engine: VitalsEngine) -> None:
    if engine.tick_number % 60 != 0:
        return
    agents = engine.agents
    pop = len(agents)
    avg_stress = (
        sum(a.get_stat(StatType.STRESS).value for a in agents) / pop if pop else 0.0
    )
    coord = engine.coordinator
    print(
        f"[t={engine.elapsed:>6.1f}s]  pop={pop:<3}  avg_stress={avg_stress:5.1f}  "
        f"temp={coord.global_temperature:5.1f}  env={coord.global_environment:5.1f}"
    )


# ---------------------------------------------------------------------------
# Setup and run
# ---------------------------------------------------------------------------

def setup_engine(seed: int) -> VitalsEngine:
    engine = VitalsEngine(tps=2, seed=seed, nearby=lambda stats: len(engine.agents) - 1)
    for i in range(12):
        engine.spawn(max_lifespan=120.0 + i * 15.0)

    def on_death(eng: VitalsEngine, stats: EntityStats, reason: str) -> None:
        print(f"  {stats.name} died ({reason}) at {stats.current_age:.1f}s")

    engine.on_death(on_death)
    return engine


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--ticks", type=int, default=600)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    print(f"=== Terrarium demo (seed={args.seed}) ===\n")
    engine = setup_engine(args.seed)
    for _ in range(args.ticks):
        forage(engine)
        engine.step()
        census(engine)
    print(f"\nSurvivors after {engine.elapsed:.0f}s: {len(engine.agents)}")


if __name__ == "__main__":
    main()
