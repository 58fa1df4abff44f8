"""Transactional reset and seed of cataloged tables."""

from __future__ import annotations

from collections.abc import Iterator
from itertools import groupby
from typing import Any

from sqlalchemy import Connection, Engine, delete, func, insert, select
from sqlalchemy.exc import DBAPIError

from fixtureforge.core.exceptions import SeedFailure
from fixtureforge.core.logging import get_logger
from fixtureforge.features.catalog import Catalog, TableDescriptor, verify_live_schema
from fixtureforge.features.reset.backends import ConstraintToggle
from fixtureforge.features.snapshots import Row, Snapshot, SnapshotStore
from fixtureforge.features.snapshots.codec import check_tables_cataloged

logger = get_logger(__name__)


class FixtureEngine:
    """Clears and seeds every cataloged table with enforcement suspended.

    Each operation is a single transaction: constraints are disabled on every
    table, all tables are brought to their target content, constraints are
    re-enabled and the transaction commits. Any failure rolls the whole
    operation back, so no partial deletion or insertion is ever visible.
    """

    def __init__(
        self,
        engine: Engine,
        catalog: Catalog,
        toggle: ConstraintToggle,
        verify_schema: bool = True,
        batch_size: int = 1000,
    ) -> None:
        """Initialize the fixture engine.

        Args:
            engine: SQLAlchemy engine for the target database.
            catalog: Tables under fixture control.
            toggle: Backend-specific constraint toggle.
            verify_schema: Check the live schema against the catalog first.
            batch_size: Rows per executemany batch when seeding.
        """
        self.engine = engine
        self.catalog = catalog
        self.toggle = toggle
        self.verify_schema = verify_schema
        self.batch_size = batch_size

    def _disable_all(self, conn: Connection) -> None:
        for table in self.catalog.list_tables():
            self.toggle.disable_all(conn, self.catalog.sql_table(table.name))

    def _enable_all(self, conn: Connection) -> None:
        for table in self.catalog.list_tables():
            self.toggle.enable_all(conn, self.catalog.sql_table(table.name))

    def clear(self) -> dict[str, int]:
        """Delete every row of every cataloged table in one transaction.

        Returns:
            Dictionary of table names to deleted row counts.
        """
        logger.info("fixtures.clear.started", tables=len(self.catalog), backend=self.toggle.name)
        counts: dict[str, int] = {}

        try:
            with self.engine.begin() as conn:
                if self.verify_schema:
                    verify_live_schema(conn, self.catalog)

                self._disable_all(conn)
                for table in self.catalog.list_tables():
                    cursor_result = conn.execute(delete(self.catalog.sql_table(table.name)))
                    row_count = getattr(cursor_result, "rowcount", None)
                    counts[table.name] = row_count if row_count is not None and row_count >= 0 else 0
                self._enable_all(conn)
        except Exception as e:
            logger.error("fixtures.clear.failed", error=str(e), error_type=type(e).__name__)
            raise

        logger.info("fixtures.clear.completed", total_deleted=sum(counts.values()))
        return counts

    def _batches(self, rows: list[Row]) -> Iterator[list[Row]]:
        # Rows sharing a column set go in one executemany; keys drive the column list
        for _, group in groupby(rows, key=lambda row: tuple(row)):
            same_columns = list(group)
            for i in range(0, len(same_columns), self.batch_size):
                yield same_columns[i : i + self.batch_size]

    def _insert_rows(self, conn: Connection, table: TableDescriptor, rows: list[Row]) -> int:
        sql_table = self.catalog.sql_table(table.name)
        inserted = 0
        for batch in self._batches(rows):
            try:
                conn.execute(insert(sql_table), batch)
            except DBAPIError as e:
                logger.error(
                    "fixtures.seed.insert_failed",
                    table=table.name,
                    error=str(e.orig),
                )
                raise SeedFailure(table.name, str(e.orig)) from e
            inserted += len(batch)
        return inserted

    def seed(self, snapshot: Snapshot) -> dict[str, int]:
        """Insert a snapshot's rows into the cataloged tables in one transaction.

        Args:
            snapshot: Content to insert. Tables absent from it stay untouched.

        Returns:
            Dictionary of table names to inserted row counts.

        Raises:
            SchemaMismatchError: If the snapshot has tables/columns not in the catalog.
            SeedFailure: If an insert fails.
            ConstraintToggleFailure: If enforcement cannot be switched.
        """
        check_tables_cataloged(snapshot, self.catalog)
        logger.info("fixtures.seed.started", rows=snapshot.row_count, backend=self.toggle.name)
        counts: dict[str, int] = {}

        try:
            with self.engine.begin() as conn:
                if self.verify_schema:
                    verify_live_schema(conn, self.catalog)

                self._disable_all(conn)
                for table in self.catalog.list_tables():
                    rows = snapshot.rows(table.name)
                    if not rows:
                        continue
                    counts[table.name] = self._insert_rows(conn, table, rows)
                    logger.debug("fixtures.seed.table", table=table.name, count=counts[table.name])
                self._enable_all(conn)
        except Exception as e:
            logger.error("fixtures.seed.failed", error=str(e), error_type=type(e).__name__)
            raise

        logger.info("fixtures.seed.completed", total_inserted=sum(counts.values()))
        return counts

    def read(self) -> Snapshot:
        """Current content of every cataloged table."""
        store = SnapshotStore(self.catalog, verify_schema=self.verify_schema)
        with self.engine.connect() as conn:
            return store.read_from_database(conn)

    def row_counts(self) -> dict[str, int]:
        """Get current row counts for every cataloged table."""
        counts: dict[str, int] = {}
        with self.engine.connect() as conn:
            for table in self.catalog.list_tables():
                sql_table = self.catalog.sql_table(table.name)
                result = conn.execute(select(func.count()).select_from(sql_table))
                counts[table.name] = result.scalar() or 0
        return counts

    def describe(self) -> dict[str, Any]:
        """Summary used in CLI banners and log context."""
        return {
            "backend": self.toggle.name,
            "tables": list(self.catalog.names),
            "verify_schema": self.verify_schema,
        }
