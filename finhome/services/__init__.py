"""Services that compose the calculators into higher-level analyses."""

from .scenario_engine import (
    ScenarioEngine,
    build_predefined_scenarios,
    generate_predefined_scenarios,
    generate_scenario,
    generate_scenarios,
)

__all__ = [
    "ScenarioEngine",
    "build_predefined_scenarios",
    "generate_predefined_scenarios",
    "generate_scenario",
    "generate_scenarios",
]
