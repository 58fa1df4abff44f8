#!/usr/bin/env python
"""Scenario generator CLI.

Replays scenarios against a scratch database, parents first, and writes one
snapshot file per scenario.

Usage:
    # Generate every scenario of a module
    uv run python scripts/generate_scenarios.py --scenarios examples.identity.scenarios \
        --catalog examples/identity/catalog.yaml --output-dir ./scenarios

    # Regenerate one scenario and everything built on it
    uv run python scripts/generate_scenarios.py --scenarios examples.identity.scenarios \
        --only CreateUsers

    # List scenarios in generation order
    uv run python scripts/generate_scenarios.py --scenarios examples.identity.scenarios --list
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path
from types import ModuleType

from fixtureforge.core.config import get_settings
from fixtureforge.core.exceptions import FixtureError, GenerationFailure
from fixtureforge.core.logging import configure_logging
from fixtureforge.features.scenarios import (
    GenerationReport,
    ScenarioGenerator,
    ScenarioRegistry,
    discover_scenarios,
)
from fixtureforge.shared.runtime import build_runtime


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        description="FixtureForge Scenario Generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate all identity scenarios
  generate_scenarios.py --scenarios examples.identity.scenarios \\
      --catalog examples/identity/catalog.yaml

  # Regenerate CreateUsers and its descendants only
  generate_scenarios.py --scenarios examples.identity.scenarios --only CreateUsers

  # Use a throwaway SQLite database
  generate_scenarios.py --scenarios examples.identity.scenarios \\
      --database-url sqlite:///./scratch.db
        """,
    )

    parser.add_argument(
        "--scenarios",
        required=True,
        help="Module defining the scenarios (e.g. examples.identity.scenarios)",
    )
    parser.add_argument(
        "--database-url",
        help="Scratch database URL (default: DATABASE_URL)",
    )
    parser.add_argument(
        "--catalog",
        type=Path,
        help="Catalog YAML file (default: CATALOG_PATH)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory for snapshot files (default: SCENARIOS_FOLDER_PATH)",
    )
    parser.add_argument(
        "--only",
        action="append",
        metavar="KEY",
        help="Generate only this scenario and its descendants (repeatable)",
    )
    parser.add_argument(
        "--app-dir",
        type=Path,
        default=Path("."),
        help="Directory to import the scenarios module from (default: current directory)",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List scenarios in generation order and exit",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable detailed logging",
    )

    return parser


def load_scenarios_module(name: str, app_dir: Path) -> ModuleType:
    """Import the module that defines the scenarios."""
    app_path = str(app_dir.resolve())
    if app_path not in sys.path:
        sys.path.insert(0, app_path)
    return importlib.import_module(name)


def print_banner() -> None:
    """Print the generator banner."""
    print()
    print("=" * 60)
    print("  FixtureForge - Scenario Generator")
    print("=" * 60)
    print()


def print_scenarios(registry: ScenarioRegistry) -> None:
    """Print scenarios in generation order."""
    print("Scenarios (generation order):")
    print("-" * 40)
    for scenario in registry.ordered():
        parent = scenario.parent.key if scenario.parent else "-"
        print(f"  {scenario.key:<28} parent: {parent}")
    print()


def print_report(report: GenerationReport) -> None:
    """Print one line per scenario outcome."""
    for outcome in report.outcomes:
        if outcome.status == "generated":
            rows = sum(outcome.rows.values())
            print(
                f"[OK]   {outcome.key:<28} {rows:>6,} rows  "
                f"{outcome.duration_seconds:>6.2f}s  -> {outcome.path}"
            )
        elif outcome.status == "failed":
            print(f"[FAIL] {outcome.key:<28} {outcome.error}")
        else:
            print(f"[SKIP] {outcome.key}")
    print()


def main() -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    configure_logging("DEBUG" if args.verbose else None)
    print_banner()

    try:
        module = load_scenarios_module(args.scenarios, args.app_dir)
        registry = discover_scenarios(module)
    except ImportError as e:
        print(f"ERROR: Cannot import scenarios module '{args.scenarios}': {e}")
        return 1
    except FixtureError as e:
        print(f"ERROR: {e.message}")
        return 1

    if args.list:
        print_scenarios(registry)
        return 0

    settings = get_settings()
    try:
        runtime = build_runtime(settings, database_url=args.database_url, catalog_path=args.catalog)
        output_dir = args.output_dir or runtime.scenarios_dir
    except (FixtureError, FileNotFoundError) as e:
        print(f"ERROR: {e}")
        return 1

    generator = ScenarioGenerator(
        runtime.fixture_engine,
        runtime.store,
        output_dir,
        runtime.context_factory(getattr(module, "build_context", None)),
    )

    print(f"Backend:     {runtime.fixture_engine.toggle.name}")
    print(f"Tables:      {', '.join(runtime.catalog.names)}")
    print(f"Output dir:  {output_dir}")
    print()

    try:
        report = generator.generate(registry, only=args.only)
    except GenerationFailure as e:
        print_report(e.report)
        print(f"Scenario '{e.scenario_key}' failed:")
        print(f"  {type(e.cause).__name__}: {e.cause}")
        return 1
    except FixtureError as e:
        print(f"ERROR: {e.message}")
        return 1
    finally:
        runtime.dispose()

    print_report(report)
    print(f"Generated {len(report.generated)} scenario file(s).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
