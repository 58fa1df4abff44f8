"""Test-time loader: apply a generated scenario snapshot to the database."""

from __future__ import annotations

from pathlib import Path

from fixtureforge.core.config import Settings
from fixtureforge.core.exceptions import LoadFailure
from fixtureforge.core.logging import bind_scenario, get_logger
from fixtureforge.features.reset import FixtureEngine
from fixtureforge.features.snapshots import Snapshot, SnapshotStore
from fixtureforge.shared.runtime import build_runtime

logger = get_logger(__name__)


class ScenarioLoader:
    """Loads named scenario snapshots into the database.

    Loading a scenario replaces the content of every cataloged table, so
    tests that load one scenario never see rows from another.

    Example:
        loader = build_loader()
        loader.load_scenario("CreateAdminUser")
    """

    def __init__(
        self,
        fixture_engine: FixtureEngine,
        store: SnapshotStore,
        scenarios_dir: Path | str,
    ) -> None:
        self.fixture_engine = fixture_engine
        self.store = store
        self.scenarios_dir = Path(scenarios_dir)

    def path_for(self, key: str) -> Path:
        return self.store.path_for(key, self.scenarios_dir)

    def available(self) -> list[str]:
        """Keys of the snapshot files present in the scenarios directory."""
        if not self.scenarios_dir.is_dir():
            return []
        pattern = f"*.{self.store.extension}"
        return sorted(p.stem for p in self.scenarios_dir.glob(pattern) if p.is_file())

    def load_scenario(self, key: str) -> Snapshot:
        """Clear the database and seed it with a scenario snapshot.

        Args:
            key: Scenario key (snapshot file stem).

        Returns:
            The snapshot that was seeded.

        Raises:
            LoadFailure: If no snapshot file exists for key. Raised before
                the database is touched.
            SnapshotFormatError: If the file is malformed. The file is
                parsed before clearing, so the database is left as it was.
            SchemaMismatchError: If the file names tables or columns the
                catalog lacks. Also raised before clearing.
            SeedFailure: If inserting the rows failed.
        """
        path = self.path_for(key)
        if not path.is_file():
            logger.error("loader.scenario.not_found", scenario_key=key, path=str(path))
            raise LoadFailure(key, path)

        with bind_scenario(key):
            snapshot = self.store.load_from_file(path)
            self.fixture_engine.clear()
            counts = self.fixture_engine.seed(snapshot)
            logger.info("loader.scenario.loaded", path=str(path), rows=sum(counts.values()))
        return snapshot

    def current_snapshot(self) -> Snapshot:
        """Full current content of the cataloged tables."""
        with self.fixture_engine.engine.connect() as conn:
            return self.store.read_from_database(conn)


def build_loader(settings: Settings | None = None) -> ScenarioLoader:
    """Build a loader from settings.

    Uses SCENARIOS_FOLDER_PATH, DATABASE_URL and CATALOG_PATH.

    Raises:
        FixtureConfigError: If SCENARIOS_FOLDER_PATH is empty.
    """
    runtime = build_runtime(settings)
    return ScenarioLoader(runtime.fixture_engine, runtime.store, runtime.scenarios_dir)
