"""Scenario generator: build and persist snapshot files, parents first."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from fixtureforge.core.exceptions import GenerationFailure, LoadFailure
from fixtureforge.core.logging import bind_scenario, get_logger
from fixtureforge.features.reset import FixtureEngine
from fixtureforge.features.scenarios.base import Scenario
from fixtureforge.features.scenarios.registry import ScenarioRegistry
from fixtureforge.features.snapshots import SnapshotStore

logger = get_logger(__name__)

ScenarioStatus = Literal["generated", "failed", "skipped"]

# Opens one transaction and yields the domain context handed to Scenario.populate
ContextFactory = Callable[[], AbstractContextManager[Any]]


@dataclass
class ScenarioOutcome:
    """Result of generating one scenario."""

    key: str
    status: ScenarioStatus
    path: Path | None = None
    rows: dict[str, int] = field(default_factory=dict)
    duration_seconds: float = 0.0
    error: str | None = None


@dataclass
class GenerationReport:
    """Outcome of every scenario in a generation batch, in execution order."""

    outcomes: list[ScenarioOutcome] = field(default_factory=list)

    def _with_status(self, status: ScenarioStatus) -> list[ScenarioOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def generated(self) -> list[ScenarioOutcome]:
        return self._with_status("generated")

    @property
    def failed(self) -> list[ScenarioOutcome]:
        return self._with_status("failed")

    @property
    def skipped(self) -> list[ScenarioOutcome]:
        return self._with_status("skipped")

    @property
    def succeeded(self) -> bool:
        return not self.failed and not self.skipped

    def get(self, key: str) -> ScenarioOutcome | None:
        return next((o for o in self.outcomes if o.key == key), None)


class ScenarioGenerator:
    """Runs scenarios against a scratch database and saves their snapshots.

    For each scenario, in parent-first order:

    1. Clear every cataloged table.
    2. Seed the parent's snapshot file, if the scenario has a parent.
    3. Run populate() inside one transaction from the context factory.
    4. Read the full database content.
    5. Write it atomically to ``<output_dir>/<key>.<ext>``.

    The first failure halts the batch. The failing scenario's file is not
    written and files of scenarios that never ran are left as they were.
    """

    def __init__(
        self,
        fixture_engine: FixtureEngine,
        store: SnapshotStore,
        output_dir: Path | str,
        context_factory: ContextFactory,
    ) -> None:
        """Initialize the generator.

        Args:
            fixture_engine: Clears and seeds the scratch database.
            store: Reads the database and writes snapshot files.
            output_dir: Directory receiving one file per scenario.
            context_factory: Opens a transaction and yields the domain context.
        """
        self.fixture_engine = fixture_engine
        self.store = store
        self.output_dir = Path(output_dir)
        self.context_factory = context_factory

    def generate(
        self,
        scenarios: ScenarioRegistry | Iterable[type[Scenario]],
        only: Iterable[str] | None = None,
    ) -> GenerationReport:
        """Generate snapshot files for a set of scenarios.

        Args:
            scenarios: Registered scenarios, or scenario classes to register.
            only: Restrict the batch to these keys and their descendants.

        Returns:
            Report with one generated outcome per scenario.

        Raises:
            ScenarioGraphError: If the scenario set is invalid.
            GenerationFailure: If any scenario fails. The original error is
                chained and ``report`` lists the failed and skipped scenarios.
        """
        registry = scenarios if isinstance(scenarios, ScenarioRegistry) else ScenarioRegistry(scenarios)
        if only is not None:
            registry = registry.subset(only)

        ordered = registry.ordered()
        instances = [scenario_cls() for scenario_cls in ordered]
        report = GenerationReport()

        logger.info(
            "generator.batch.started",
            scenarios=len(ordered),
            output_dir=str(self.output_dir),
        )
        batch_start = time.perf_counter()

        for index, scenario in enumerate(instances):
            start = time.perf_counter()
            with bind_scenario(scenario.key):
                try:
                    path, rows = self._generate_one(scenario)
                except Exception as e:
                    skipped = [s.key for s in instances[index + 1 :]]
                    report.outcomes.append(
                        ScenarioOutcome(
                            key=scenario.key,
                            status="failed",
                            duration_seconds=time.perf_counter() - start,
                            error=f"{type(e).__name__}: {e}",
                        )
                    )
                    report.outcomes.extend(ScenarioOutcome(key=k, status="skipped") for k in skipped)
                    logger.error(
                        "generator.scenario.failed",
                        error=str(e),
                        error_type=type(e).__name__,
                        skipped=skipped,
                    )
                    raise GenerationFailure(scenario.key, e, report) from e

                duration = time.perf_counter() - start
                report.outcomes.append(
                    ScenarioOutcome(
                        key=scenario.key,
                        status="generated",
                        path=path,
                        rows=rows,
                        duration_seconds=duration,
                    )
                )
                logger.info(
                    "generator.scenario.completed",
                    path=str(path),
                    rows=sum(rows.values()),
                    duration_seconds=round(duration, 3),
                )

        logger.info(
            "generator.batch.completed",
            generated=len(report.generated),
            duration_seconds=round(time.perf_counter() - batch_start, 3),
        )
        return report

    def _generate_one(self, scenario: Scenario) -> tuple[Path, dict[str, int]]:
        parent = scenario.parent
        logger.info("generator.scenario.started", parent=parent.key if parent else None)

        self.fixture_engine.clear()

        if parent is not None:
            parent_path = self.store.path_for(parent.key, self.output_dir)
            if not parent_path.is_file():
                raise LoadFailure(parent.key, parent_path)
            self.fixture_engine.seed(self.store.load_from_file(parent_path))

        with self.context_factory() as context:
            scenario.populate(context)

        with self.fixture_engine.engine.connect() as conn:
            snapshot = self.store.read_from_database(conn)

        path = self.store.write_to_file(snapshot, self.store.path_for(scenario.key, self.output_dir))
        return path, snapshot.counts()
