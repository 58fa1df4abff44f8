"""Wiring of engine, catalog, snapshot store and reset engine from settings."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any

from sqlalchemy import Engine
from sqlalchemy.orm import Session

from fixtureforge.core.config import Settings, get_settings
from fixtureforge.core.database import create_db_engine, get_session_maker, session_scope
from fixtureforge.core.exceptions import FixtureConfigError, UnsafeEnvironmentError
from fixtureforge.core.logging import get_logger
from fixtureforge.features.catalog import Catalog, load_catalog
from fixtureforge.features.reset import FixtureEngine, get_constraint_toggle
from fixtureforge.features.scenarios import ContextFactory
from fixtureforge.features.snapshots import SnapshotStore

logger = get_logger(__name__)


@dataclass
class FixtureRuntime:
    """Everything a generator or loader needs, built once per process."""

    settings: Settings
    sql_engine: Engine
    catalog: Catalog
    store: SnapshotStore
    fixture_engine: FixtureEngine

    @property
    def scenarios_dir(self) -> Path:
        """Directory holding scenario snapshot files.

        Raises:
            FixtureConfigError: If SCENARIOS_FOLDER_PATH is empty.
        """
        folder = self.settings.scenarios_folder_path.strip()
        if not folder:
            raise FixtureConfigError(
                "No SCENARIOS_FOLDER_PATH configured",
                details={"setting": "scenarios_folder_path"},
            )
        return Path(folder)

    def context_factory(self, build: Callable[[Session], Any] | None = None) -> ContextFactory:
        """Session unit-of-work factory for Scenario.populate."""
        return partial(session_scope, get_session_maker(self.sql_engine), build)

    def dispose(self) -> None:
        self.sql_engine.dispose()


def check_destructive_allowed(settings: Settings) -> None:
    """Refuse to clear or seed a production database unless explicitly allowed.

    Raises:
        UnsafeEnvironmentError: If APP_ENV is production without FIXTURES_ALLOW_PRODUCTION.
    """
    if settings.is_production and not settings.fixtures_allow_production:
        raise UnsafeEnvironmentError(
            "Refusing to run destructive fixture operations with APP_ENV=production. "
            "Set FIXTURES_ALLOW_PRODUCTION=true to override.",
            details={"app_env": settings.app_env},
        )


def build_runtime(
    settings: Settings | None = None,
    *,
    database_url: str | None = None,
    catalog_path: Path | str | None = None,
    catalog: Catalog | None = None,
    engine: Engine | None = None,
) -> FixtureRuntime:
    """Build the fixture runtime.

    Args:
        settings: Settings to use (defaults to get_settings()).
        database_url: Override for settings.database_url.
        catalog_path: Override for settings.catalog_path.
        catalog: Prebuilt catalog; skips loading the catalog file.
        engine: Prebuilt engine; skips engine creation.

    Returns:
        Runtime with a reset engine using the backend's constraint toggle.

    Raises:
        UnsafeEnvironmentError: If running against production without override.
        UnsupportedBackendError: If no constraint toggle matches the backend.
        CatalogConfigError: If the catalog file is invalid.
    """
    settings = settings or get_settings()
    check_destructive_allowed(settings)

    if catalog is None:
        catalog = load_catalog(catalog_path or settings.catalog_path)
    sql_engine = engine or create_db_engine(database_url or settings.database_url)
    toggle = get_constraint_toggle(settings.fixture_backend, sql_engine.dialect.name)

    store = SnapshotStore(
        catalog,
        root_element=settings.snapshot_root_element,
        extension=settings.snapshot_extension,
        verify_schema=settings.fixtures_verify_schema,
    )
    fixture_engine = FixtureEngine(
        sql_engine,
        catalog,
        toggle,
        verify_schema=settings.fixtures_verify_schema,
    )

    logger.info(
        "runtime.ready",
        backend=toggle.name,
        tables=len(catalog),
        app_env=settings.app_env,
    )
    return FixtureRuntime(
        settings=settings,
        sql_engine=sql_engine,
        catalog=catalog,
        store=store,
        fixture_engine=fixture_engine,
    )
