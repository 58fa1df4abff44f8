"""Tests for runtime wiring."""

import pytest
from sqlalchemy.orm import Session

from examples.identity.domain import IdentityUnitOfWork
from fixtureforge.core.config import Settings
from fixtureforge.core.exceptions import FixtureConfigError, UnsafeEnvironmentError
from fixtureforge.features.reset import PostgreSQLConstraintToggle, SQLiteConstraintToggle
from fixtureforge.shared.runtime import build_runtime, check_destructive_allowed


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestCheckDestructiveAllowed:
    """Tests for the production guard."""

    def test_development_allowed(self):
        """Test non-production environments pass."""
        check_destructive_allowed(_settings(app_env="development"))
        check_destructive_allowed(_settings(app_env="testing"))

    def test_production_refused(self):
        """Test production is refused by default."""
        with pytest.raises(UnsafeEnvironmentError, match="FIXTURES_ALLOW_PRODUCTION"):
            check_destructive_allowed(_settings(app_env="production"))

    def test_production_override(self):
        """Test the explicit override allows production."""
        check_destructive_allowed(_settings(app_env="production", fixtures_allow_production=True))


class TestBuildRuntime:
    """Tests for build_runtime."""

    def test_wires_components(self, sql_engine, identity_catalog, tmp_path):
        """Test engine, catalog, store and reset engine share settings."""
        settings = _settings(
            scenarios_folder_path=str(tmp_path),
            snapshot_root_element="IdentitySchema",
            snapshot_extension="fixture",
            fixtures_verify_schema=False,
        )

        runtime = build_runtime(settings, catalog=identity_catalog, engine=sql_engine)

        assert runtime.catalog is identity_catalog
        assert runtime.store.root_element == "IdentitySchema"
        assert runtime.store.extension == "fixture"
        assert runtime.store.verify_schema is False
        assert runtime.fixture_engine.verify_schema is False
        assert isinstance(runtime.fixture_engine.toggle, SQLiteConstraintToggle)
        assert runtime.scenarios_dir == tmp_path

    def test_loads_catalog_from_path(self, sqlite_url, identity_catalog_path):
        """Test the catalog and engine are built from settings."""
        runtime = build_runtime(
            _settings(database_url=sqlite_url, catalog_path=str(identity_catalog_path))
        )
        try:
            assert runtime.catalog.names == ("roles", "users", "user_roles")
            assert runtime.sql_engine.dialect.name == "sqlite"
        finally:
            runtime.dispose()

    def test_explicit_backend(self, sql_engine, identity_catalog):
        """Test FIXTURE_BACKEND overrides the dialect."""
        runtime = build_runtime(
            _settings(fixture_backend="postgresql"), catalog=identity_catalog, engine=sql_engine
        )
        assert isinstance(runtime.fixture_engine.toggle, PostgreSQLConstraintToggle)

    def test_production_guard(self, sql_engine, identity_catalog):
        """Test the runtime refuses production settings."""
        with pytest.raises(UnsafeEnvironmentError):
            build_runtime(_settings(app_env="production"), catalog=identity_catalog, engine=sql_engine)

    def test_missing_catalog_file(self, sql_engine, tmp_path):
        """Test a missing catalog file is reported."""
        with pytest.raises(FileNotFoundError):
            build_runtime(_settings(catalog_path=str(tmp_path / "none.yaml")), engine=sql_engine)

    def test_empty_scenarios_folder(self, sql_engine, identity_catalog):
        """Test an empty scenarios folder setting is a configuration error."""
        runtime = build_runtime(
            _settings(scenarios_folder_path="  "), catalog=identity_catalog, engine=sql_engine
        )
        with pytest.raises(FixtureConfigError):
            _ = runtime.scenarios_dir

    def test_context_factory(self, sql_engine, identity_catalog):
        """Test the factory yields a session or a built domain context."""
        runtime = build_runtime(_settings(), catalog=identity_catalog, engine=sql_engine)

        with runtime.context_factory()() as session:
            assert isinstance(session, Session)

        with runtime.context_factory(IdentityUnitOfWork)() as uow:
            uow.roles.create("r1", "Admin")

        assert runtime.fixture_engine.row_counts()["roles"] == 1
