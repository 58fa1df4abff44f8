#!/usr/bin/env python
"""Load a generated scenario into the configured database.

Usage:
    # Replace the database content with a scenario
    uv run python scripts/load_scenario.py CreateAdminUser --confirm

    # Show available scenario files
    uv run python scripts/load_scenario.py --list
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from fixtureforge.core.config import get_settings
from fixtureforge.core.exceptions import FixtureError
from fixtureforge.core.logging import configure_logging
from fixtureforge.features.loader import ScenarioLoader
from fixtureforge.shared.runtime import build_runtime


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        description="FixtureForge Scenario Loader",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  load_scenario.py CreateAdminUser --confirm
  load_scenario.py CreateUsers --scenarios-dir ./scenarios --confirm
  load_scenario.py --list
        """,
    )

    parser.add_argument("key", nargs="?", help="Scenario key to load")
    parser.add_argument(
        "--database-url",
        help="Target database URL (default: DATABASE_URL)",
    )
    parser.add_argument(
        "--catalog",
        type=Path,
        help="Catalog YAML file (default: CATALOG_PATH)",
    )
    parser.add_argument(
        "--scenarios-dir",
        type=Path,
        help="Directory holding snapshot files (default: SCENARIOS_FOLDER_PATH)",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List available scenario files and exit",
    )
    parser.add_argument(
        "--confirm",
        action="store_true",
        help="Confirm replacing every row of the cataloged tables",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable detailed logging",
    )

    return parser


def print_counts(counts: dict[str, int], title: str = "Loaded Rows") -> None:
    """Print table counts in a formatted way."""
    print(f"\n{title}:")
    print("-" * 40)
    for table, count in counts.items():
        print(f"  {table:<30} {count:>8,}")
    print("-" * 40)
    print(f"  {'Total':<30} {sum(counts.values()):>8,}")
    print()


def main() -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    configure_logging("DEBUG" if args.verbose else None)

    if not args.list and not args.key:
        parser.error("a scenario KEY is required unless --list is given")

    if not args.list and not args.confirm:
        print("ERROR: --confirm flag required to load a scenario.")
        print("Loading deletes every row of the cataloged tables.")
        return 1

    settings = get_settings()
    try:
        runtime = build_runtime(settings, database_url=args.database_url, catalog_path=args.catalog)
        scenarios_dir = args.scenarios_dir or runtime.scenarios_dir
    except (FixtureError, FileNotFoundError) as e:
        print(f"ERROR: {e}")
        return 1

    loader = ScenarioLoader(runtime.fixture_engine, runtime.store, scenarios_dir)

    try:
        if args.list:
            available = loader.available()
            print(f"Scenario files in {scenarios_dir}:")
            for key in available:
                print(f"  {key}")
            if not available:
                print("  (none)")
            return 0

        snapshot = loader.load_scenario(args.key)
    except FixtureError as e:
        print(f"[FAIL] {args.key}: {e.message}")
        return 1
    finally:
        runtime.dispose()

    print(f"[OK] Loaded scenario '{args.key}'")
    print_counts({name: snapshot.counts().get(name, 0) for name in runtime.catalog.names})
    return 0


if __name__ == "__main__":
    sys.exit(main())
