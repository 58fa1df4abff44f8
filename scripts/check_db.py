#!/usr/bin/env python
"""Check database connectivity and the table catalog.

Usage:
    uv run python scripts/check_db.py
"""

import sys

from sqlalchemy import text

from fixtureforge.core.config import get_settings
from fixtureforge.core.database import create_db_engine
from fixtureforge.core.exceptions import FixtureError
from fixtureforge.features.catalog import load_catalog, verify_live_schema
from fixtureforge.features.reset import get_constraint_toggle


def check_database() -> int:
    """Verify connectivity, backend support and catalog/schema agreement."""
    settings = get_settings()

    print("FixtureForge - Database Check")
    print("=" * 45)
    print(f"Database URL: {settings.database_url.split('@')[-1]}")  # Hide credentials
    print(f"Catalog:      {settings.catalog_path}")
    print()

    engine = create_db_engine()

    try:
        with engine.connect() as conn:
            result = conn.execute(text("SELECT 1"))
            assert result.scalar() == 1
            print(f"[OK] Basic connectivity ({engine.dialect.name})")

            toggle = get_constraint_toggle(settings.fixture_backend, engine.dialect.name)
            print(f"[OK] Constraint toggle: {toggle.name}")

            catalog = load_catalog(settings.catalog_path)
            print(f"[OK] Catalog loaded: {len(catalog)} tables")

            verify_live_schema(conn, catalog)
            print("[OK] Catalog matches live schema")

        print()
        print("Database check completed successfully!")
        return 0

    except FixtureError as e:
        print(f"[FAIL] {e.title}: {e.message}")
        for problem in e.details.get("problems", []):
            print(f"       - {problem}")
        return 1

    except FileNotFoundError as e:
        print(f"[FAIL] {e}")
        return 1

    except Exception as e:
        print(f"[FAIL] Connection failed: {e}")
        print()
        print("Troubleshooting:")
        print("  1. Ensure the database is running")
        print("  2. Check DATABASE_URL in .env file")
        print("  3. Check CATALOG_PATH points at the catalog YAML")
        return 1

    finally:
        engine.dispose()


def main():
    sys.exit(check_database())


if __name__ == "__main__":
    main()
