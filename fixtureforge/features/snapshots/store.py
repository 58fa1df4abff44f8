"""Snapshot store: capture database content and persist it as fixture files."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from sqlalchemy import Connection, select

from fixtureforge.core.logging import get_logger
from fixtureforge.features.catalog import Catalog, verify_live_schema
from fixtureforge.features.snapshots.codec import snapshot_from_xml, snapshot_to_xml
from fixtureforge.features.snapshots.models import Snapshot

logger = get_logger(__name__)


class SnapshotStore:
    """Reads snapshots from the database and from/to snapshot files.

    Attributes:
        catalog: Tables captured and restored.
        root_element: Name of the XML document element.
        extension: File extension for snapshot files (without dot).
        verify_schema: Check the live schema against the catalog before reading.
    """

    def __init__(
        self,
        catalog: Catalog,
        root_element: str = "AppSchema",
        extension: str = "xml",
        verify_schema: bool = True,
    ) -> None:
        self.catalog = catalog
        self.root_element = root_element
        self.extension = extension.lstrip(".")
        self.verify_schema = verify_schema

    def path_for(self, key: str, directory: Path | str) -> Path:
        """Snapshot file path for a scenario key."""
        return Path(directory) / f"{key}.{self.extension}"

    def read_from_database(self, connection: Connection) -> Snapshot:
        """Capture the full content of every cataloged table.

        Rows are ordered by each table's key columns so repeated reads of the
        same content produce the same snapshot.

        Args:
            connection: Open database connection.

        Returns:
            Snapshot of all cataloged tables (empty tables omitted).

        Raises:
            SchemaMismatchError: If verification is on and the schema drifted.
        """
        if self.verify_schema:
            verify_live_schema(connection, self.catalog)

        snapshot = Snapshot()
        for table in self.catalog.list_tables():
            sql_table = self.catalog.sql_table(table.name)
            stmt = select(sql_table).order_by(*(sql_table.c[name] for name in table.order_by))
            result = connection.execute(stmt)
            snapshot.add_rows(table.name, result.mappings())

        logger.info(
            "snapshots.read.completed",
            tables=len(snapshot.table_names),
            rows=snapshot.row_count,
        )
        return snapshot

    def load_from_file(self, path: Path | str) -> Snapshot:
        """Load a snapshot file.

        Args:
            path: Snapshot file path.

        Returns:
            Snapshot with values decoded to their catalog types.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            SnapshotFormatError: If the file is malformed.
            SchemaMismatchError: If it references tables/columns not in the catalog.
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Snapshot file not found: {path}")

        snapshot = snapshot_from_xml(path.read_bytes(), self.catalog)
        logger.debug("snapshots.file.loaded", path=str(path), rows=snapshot.row_count)
        return snapshot

    def write_to_file(self, snapshot: Snapshot, path: Path | str) -> Path:
        """Persist a snapshot atomically.

        The document is written to a temporary file beside the target and
        renamed into place, so a failed write never leaves a partial file.

        Args:
            snapshot: Snapshot to persist.
            path: Destination file path.

        Returns:
            The destination path.
        """
        path = Path(path)
        data = snapshot_to_xml(snapshot, self.catalog, self.root_element)
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(
            "snapshots.file.written",
            path=str(path),
            tables=len(snapshot.table_names),
            rows=snapshot.row_count,
        )
        return path
