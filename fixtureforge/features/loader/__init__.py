"""Loader feature: apply generated scenarios at test time."""

from fixtureforge.features.loader.service import ScenarioLoader, build_loader

__all__ = ["ScenarioLoader", "build_loader"]
