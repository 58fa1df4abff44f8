"""Shared pytest fixtures for FixtureForge tests.

Tests run against a SQLite file database under tmp_path with the example
identity schema (roles, users, user_roles).
"""

from datetime import datetime
from functools import partial
from pathlib import Path

import pytest
import structlog

from examples.identity.domain import Role, User, UserRole
from examples.identity.scenarios import build_context
from fixtureforge.core.database import Base, create_db_engine, get_session_maker, session_scope
from fixtureforge.features.catalog import load_catalog
from fixtureforge.features.loader import ScenarioLoader
from fixtureforge.features.reset import FixtureEngine, SQLiteConstraintToggle
from fixtureforge.features.scenarios import ScenarioGenerator
from fixtureforge.features.snapshots import Snapshot, SnapshotStore

IDENTITY_CATALOG_PATH = Path(__file__).parent / "examples" / "identity" / "catalog.yaml"


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Restore uncached structlog defaults after tests that configure logging."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def identity_catalog_path():
    """Path of the identity example catalog YAML."""
    return IDENTITY_CATALOG_PATH


@pytest.fixture
def identity_catalog(identity_catalog_path):
    """Catalog of the identity example tables."""
    return load_catalog(identity_catalog_path)


@pytest.fixture
def sqlite_url(tmp_path):
    """URL of a throwaway SQLite database file."""
    return f"sqlite:///{tmp_path / 'fixtures.db'}"


@pytest.fixture
def sql_engine(sqlite_url):
    """SQLite engine with the identity schema created."""
    engine = create_db_engine(sqlite_url, echo=False)
    Base.metadata.create_all(engine, tables=[Role.__table__, User.__table__, UserRole.__table__])
    yield engine
    engine.dispose()


@pytest.fixture
def fixture_engine(sql_engine, identity_catalog):
    """Reset/seed engine over the identity tables."""
    return FixtureEngine(sql_engine, identity_catalog, SQLiteConstraintToggle())


@pytest.fixture
def store(identity_catalog):
    """Snapshot store for the identity catalog."""
    return SnapshotStore(identity_catalog)


@pytest.fixture
def scenarios_dir(tmp_path):
    """Directory receiving generated scenario files."""
    path = tmp_path / "scenarios"
    path.mkdir()
    return path


@pytest.fixture
def context_factory(sql_engine):
    """Session unit of work yielding the identity repositories."""
    return partial(session_scope, get_session_maker(sql_engine), build_context)


@pytest.fixture
def generator(fixture_engine, store, scenarios_dir, context_factory):
    """Scenario generator writing into scenarios_dir."""
    return ScenarioGenerator(fixture_engine, store, scenarios_dir, context_factory)


@pytest.fixture
def loader(fixture_engine, store, scenarios_dir):
    """Scenario loader reading from scenarios_dir."""
    return ScenarioLoader(fixture_engine, store, scenarios_dir)


@pytest.fixture
def sample_snapshot():
    """One role, two users and one role assignment."""
    return Snapshot(
        {
            "roles": [{"id": "r1", "name": "Admin"}],
            "users": [
                {
                    "id": "u1",
                    "email": "u1@example.com",
                    "display_name": "User 1",
                    "is_active": True,
                    "created_at": datetime(2024, 1, 1, 9, 0, 0),
                },
                {
                    "id": "u2",
                    "email": "u2@example.com",
                    "display_name": "Ñoño",
                    "is_active": False,
                    "created_at": datetime(2024, 1, 2, 10, 30, 15),
                },
            ],
            "user_roles": [{"user_id": "u1", "role_id": "r1"}],
        }
    )
