"""Tests for SnapshotStore."""

from datetime import datetime
from unittest.mock import patch

import pytest
from sqlalchemy import text

from fixtureforge.core.exceptions import SchemaMismatchError, SnapshotFormatError
from fixtureforge.features.snapshots import Snapshot, SnapshotStore


class TestPathFor:
    """Tests for snapshot file naming."""

    def test_default_extension(self, store, tmp_path):
        """Test files are named <key>.xml."""
        assert store.path_for("CreateUsers", tmp_path) == tmp_path / "CreateUsers.xml"

    def test_custom_extension(self, identity_catalog, tmp_path):
        """Test a configured extension, with or without dot."""
        store = SnapshotStore(identity_catalog, extension=".fixture")
        assert store.path_for("CreateUsers", tmp_path) == tmp_path / "CreateUsers.fixture"


class TestReadFromDatabase:
    """Tests for read_from_database."""

    def test_empty_database(self, store, sql_engine):
        """Test an empty database reads as an empty snapshot."""
        with sql_engine.connect() as conn:
            assert store.read_from_database(conn).is_empty()

    def test_reads_rows_ordered_by_key(self, store, sql_engine):
        """Test rows are ordered by key columns, not insertion order."""
        with sql_engine.begin() as conn:
            conn.execute(text("INSERT INTO roles (id, name) VALUES ('r2', 'Guest'), ('r1', 'Admin')"))

        with sql_engine.connect() as conn:
            snapshot = store.read_from_database(conn)

        assert snapshot.rows("roles") == [
            {"id": "r1", "name": "Admin"},
            {"id": "r2", "name": "Guest"},
        ]
        assert snapshot.table_names == ("roles",)

    def test_schema_drift_detected(self, store, sql_engine):
        """Test a missing column fails before reading."""
        with sql_engine.begin() as conn:
            conn.execute(text("ALTER TABLE users DROP COLUMN display_name"))

        with sql_engine.connect() as conn, pytest.raises(SchemaMismatchError):
            store.read_from_database(conn)


class TestFiles:
    """Tests for write_to_file and load_from_file."""

    def test_write_then_load(self, store, tmp_path, sample_snapshot):
        """Test a written snapshot loads back equal."""
        path = store.write_to_file(sample_snapshot, tmp_path / "Sample.xml")

        assert path == tmp_path / "Sample.xml"
        assert store.load_from_file(path) == sample_snapshot

    def test_crlf_text_loads_back_unchanged(self, store, tmp_path, sample_snapshot):
        """Test Windows line endings in text columns are kept byte for byte."""
        snapshot = Snapshot(sample_snapshot.to_dict())
        snapshot.add_row(
            "users",
            {
                "id": "u3",
                "email": "u3@example.com",
                "display_name": "line1\r\nline2",
                "is_active": True,
                "created_at": datetime(2024, 1, 3, 8, 0, 0),
            },
        )

        loaded = store.load_from_file(store.write_to_file(snapshot, tmp_path / "Crlf.xml"))

        assert loaded.first("users", id="u3")["display_name"] == "line1\r\nline2"
        assert loaded == snapshot

    def test_write_creates_directory(self, store, tmp_path, sample_snapshot):
        """Test missing parent directories are created."""
        path = store.write_to_file(sample_snapshot, tmp_path / "nested" / "dir" / "Sample.xml")
        assert path.is_file()

    def test_write_is_deterministic(self, store, tmp_path, sample_snapshot):
        """Test writing the same content twice gives identical bytes."""
        first = store.write_to_file(sample_snapshot, tmp_path / "a.xml").read_bytes()
        second = store.write_to_file(sample_snapshot, tmp_path / "b.xml").read_bytes()

        assert first == second

    def test_failed_write_keeps_existing_file(self, store, tmp_path, sample_snapshot):
        """Test a failure while writing leaves the old file and no temp files."""
        path = store.write_to_file(sample_snapshot, tmp_path / "Sample.xml")
        before = path.read_bytes()

        with patch("fixtureforge.features.snapshots.store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError, match="disk full"):
                store.write_to_file(Snapshot(), path)

        assert path.read_bytes() == before
        assert [p.name for p in tmp_path.iterdir()] == ["Sample.xml"]

    def test_write_rejects_uncataloged_table(self, store, tmp_path):
        """Test nothing is written for tables the catalog lacks."""
        path = tmp_path / "Bad.xml"
        with pytest.raises(SchemaMismatchError):
            store.write_to_file(Snapshot({"pets": [{"id": 1}]}), path)

        assert not path.exists()

    def test_load_missing_file(self, store, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            store.load_from_file(tmp_path / "Missing.xml")

    def test_load_malformed_file(self, store, tmp_path):
        """Test a truncated file is a format error."""
        path = tmp_path / "Broken.xml"
        path.write_bytes(b"<AppSchema><roles><id>r1</id>")

        with pytest.raises(SnapshotFormatError):
            store.load_from_file(path)

    def test_custom_root_element(self, identity_catalog, tmp_path, sample_snapshot):
        """Test the configured root element is used."""
        store = SnapshotStore(identity_catalog, root_element="IdentitySchema")
        path = store.write_to_file(sample_snapshot, tmp_path / "Sample.xml")

        assert b"<IdentitySchema>" in path.read_bytes()
        assert store.load_from_file(path) == sample_snapshot
