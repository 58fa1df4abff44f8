"""Scenarios feature: composable seeding units and snapshot generation."""

from fixtureforge.features.scenarios.base import KEY_PATTERN, Scenario
from fixtureforge.features.scenarios.generator import (
    ContextFactory,
    GenerationReport,
    ScenarioGenerator,
    ScenarioOutcome,
)
from fixtureforge.features.scenarios.registry import ScenarioRegistry, discover_scenarios

__all__ = [
    "KEY_PATTERN",
    "ContextFactory",
    "GenerationReport",
    "Scenario",
    "ScenarioGenerator",
    "ScenarioOutcome",
    "ScenarioRegistry",
    "discover_scenarios",
]
