"""Fixture engine exception hierarchy.

Every operation (clear, seed, generate, load) aborts completely on any of these
errors. Each exception carries a machine-readable code and a details mapping so
CLI output and structured logs can name the table, scenario or file involved.
"""

from pathlib import Path
from typing import Any


class FixtureError(Exception):
    """Base exception for fixture engine errors.

    All engine-specific exceptions inherit from this class.
    """

    default_code: str = "FIXTURE_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize fixture error.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code.
            details: Additional error context.
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    @property
    def title(self) -> str:
        """Short summary of the error type."""
        return self.code.replace("_", " ").title()


# =============================================================================
# Configuration errors
# =============================================================================


class FixtureConfigError(FixtureError):
    """Required configuration is missing or invalid."""

    default_code = "CONFIG_ERROR"


class CatalogConfigError(FixtureConfigError):
    """Catalog document could not be parsed or validated."""

    default_code = "CATALOG_CONFIG_ERROR"


class UnsupportedBackendError(FixtureConfigError):
    """No constraint toggle exists for the requested database backend."""

    default_code = "UNSUPPORTED_BACKEND"

    def __init__(self, backend: str, supported: list[str]) -> None:
        super().__init__(
            message=f"No constraint toggle for backend '{backend}'. Supported: {supported}",
            details={"backend": backend, "supported": supported},
        )
        self.backend = backend


class UnsafeEnvironmentError(FixtureConfigError):
    """Destructive operation requested against a production environment."""

    default_code = "UNSAFE_ENVIRONMENT"


# =============================================================================
# Schema and snapshot errors
# =============================================================================


class SchemaMismatchError(FixtureError):
    """Catalog and live database (or a snapshot file) disagree.

    Raised when the catalog references a table/column the database lacks, or
    when a snapshot references a table/column the catalog does not declare.
    """

    default_code = "SCHEMA_MISMATCH"


class SnapshotFormatError(FixtureError):
    """Snapshot file is malformed or holds a value that cannot be decoded."""

    default_code = "SNAPSHOT_FORMAT_ERROR"


# =============================================================================
# Reset/seed errors
# =============================================================================


class ConstraintToggleFailure(FixtureError):
    """Disabling or enabling constraint enforcement failed (e.g. privileges)."""

    default_code = "CONSTRAINT_TOGGLE_FAILURE"

    def __init__(self, table: str, backend: str, action: str, reason: str) -> None:
        super().__init__(
            message=f"Could not {action} constraints on {table} ({backend}): {reason}",
            details={"table": table, "backend": backend, "action": action},
        )
        self.table = table
        self.backend = backend


class SeedFailure(FixtureError):
    """Inserting snapshot rows failed, usually schema drift or bad data."""

    default_code = "SEED_FAILURE"

    def __init__(self, table: str, reason: str) -> None:
        super().__init__(
            message=f"Insert into {table} failed: {reason}",
            details={"table": table},
        )
        self.table = table


# =============================================================================
# Scenario errors
# =============================================================================


class ScenarioGraphError(FixtureError):
    """Scenario set is invalid (duplicate keys, cycles, unknown keys)."""

    default_code = "SCENARIO_GRAPH_ERROR"


class MissingPrerequisiteError(FixtureError):
    """Data expected from the parent scenario's snapshot is not present."""

    default_code = "MISSING_PREREQUISITE"


class GenerationFailure(FixtureError):
    """Generating a scenario snapshot failed; the batch was halted.

    The underlying error is chained as __cause__ and exposed as ``cause``.
    ``report`` holds the outcome of every scenario in the batch.
    """

    default_code = "GENERATION_FAILURE"

    def __init__(self, scenario_key: str, cause: BaseException, report: Any = None) -> None:
        super().__init__(
            message=f"Scenario '{scenario_key}' failed: {type(cause).__name__}: {cause}",
            details={"scenario_key": scenario_key, "error_type": type(cause).__name__},
        )
        self.scenario_key = scenario_key
        self.cause = cause
        self.report = report


class LoadFailure(FixtureError):
    """No snapshot file exists for the requested scenario key."""

    default_code = "LOAD_FAILURE"

    def __init__(self, key: str, path: Path) -> None:
        super().__init__(
            message=f"No scenario file found for '{key}' at [{path}]",
            details={"key": key, "path": str(path)},
        )
        self.key = key
        self.path = path
