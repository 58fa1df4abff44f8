"""Shared wiring used by the loader and CLI scripts."""

from fixtureforge.shared.runtime import FixtureRuntime, build_runtime, check_destructive_allowed

__all__ = ["FixtureRuntime", "build_runtime", "check_destructive_allowed"]
