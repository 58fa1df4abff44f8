"""Backend-specific suspension of constraint/trigger enforcement.

Clear and seed logic is backend-agnostic; only the statements that switch
enforcement off and back on differ per database engine. One toggle is chosen
at startup from settings or the SQLAlchemy dialect name.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import ClassVar

from sqlalchemy import Connection, Table
from sqlalchemy.exc import DBAPIError

from fixtureforge.core.exceptions import ConstraintToggleFailure, UnsupportedBackendError
from fixtureforge.core.logging import get_logger

logger = get_logger(__name__)


class ConstraintToggle(ABC):
    """Disable/enable enforcement for one table inside an open transaction."""

    name: ClassVar[str]

    @abstractmethod
    def disable_sql(self, quoted_table: str) -> str:
        """Statement that suspends enforcement on the table."""

    @abstractmethod
    def enable_sql(self, quoted_table: str) -> str | None:
        """Statement that restores enforcement on the table.

        None means the backend restores enforcement when the transaction ends.
        """

    def disable_all(self, connection: Connection, table: Table) -> None:
        self._run(connection, table, "disable", self.disable_sql)

    def enable_all(self, connection: Connection, table: Table) -> None:
        self._run(connection, table, "enable", self.enable_sql)

    def _run(
        self,
        connection: Connection,
        table: Table,
        action: str,
        build: Callable[[str], str | None],
    ) -> None:
        quoted = connection.dialect.identifier_preparer.format_table(table)
        statement = build(quoted)
        if statement is None:
            return
        try:
            connection.exec_driver_sql(statement)
        except DBAPIError as e:
            logger.error(
                "fixtures.constraints.toggle_failed",
                table=table.fullname,
                backend=self.name,
                action=action,
                error=str(e.orig),
            )
            raise ConstraintToggleFailure(table.fullname, self.name, action, str(e.orig)) from e


class PostgreSQLConstraintToggle(ConstraintToggle):
    """Disables all triggers, including the internal FK constraint triggers.

    Requires table ownership (or superuser for system triggers).
    """

    name = "postgresql"

    def disable_sql(self, quoted_table: str) -> str:
        return f"ALTER TABLE {quoted_table} DISABLE TRIGGER ALL"

    def enable_sql(self, quoted_table: str) -> str:
        return f"ALTER TABLE {quoted_table} ENABLE TRIGGER ALL"


class SqlServerConstraintToggle(ConstraintToggle):
    """NOCHECK all constraints; re-enabling revalidates existing rows."""

    name = "mssql"

    def disable_sql(self, quoted_table: str) -> str:
        return f"ALTER TABLE {quoted_table} NOCHECK CONSTRAINT ALL"

    def enable_sql(self, quoted_table: str) -> str:
        return f"ALTER TABLE {quoted_table} WITH CHECK CHECK CONSTRAINT ALL"


class SQLiteConstraintToggle(ConstraintToggle):
    """Defers foreign key checks to COMMIT.

    SQLite has no per-table switch and ignores PRAGMA foreign_keys inside a
    transaction, so the database-wide defer flag is set for every table.
    The flag resets itself when the transaction ends. Switching it off
    earlier would discard the violations counted so far, so enabling is a
    no-op and COMMIT checks every key.
    """

    name = "sqlite"

    def disable_sql(self, quoted_table: str) -> str:
        return "PRAGMA defer_foreign_keys = ON"

    def enable_sql(self, quoted_table: str) -> None:
        return None


CONSTRAINT_TOGGLES: dict[str, type[ConstraintToggle]] = {
    toggle.name: toggle
    for toggle in (PostgreSQLConstraintToggle, SqlServerConstraintToggle, SQLiteConstraintToggle)
}


def get_constraint_toggle(backend: str, dialect_name: str | None = None) -> ConstraintToggle:
    """Select the constraint toggle for a backend.

    Args:
        backend: Backend name, or "auto" to use dialect_name.
        dialect_name: SQLAlchemy dialect name of the target engine.

    Returns:
        Toggle instance for the backend.

    Raises:
        UnsupportedBackendError: If no toggle exists for the backend.
    """
    resolved = dialect_name if backend == "auto" else backend
    toggle_cls = CONSTRAINT_TOGGLES.get(resolved or "")
    if toggle_cls is None:
        raise UnsupportedBackendError(resolved or backend, sorted(CONSTRAINT_TOGGLES))
    return toggle_cls()
