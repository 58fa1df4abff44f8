"""Tests for the Snapshot value type."""

from fixtureforge.features.snapshots import Snapshot


class TestSnapshot:
    """Tests for Snapshot."""

    def test_empty_snapshot(self):
        """Test a new snapshot has no tables."""
        snapshot = Snapshot()

        assert snapshot.is_empty()
        assert snapshot.table_names == ()
        assert snapshot.row_count == 0
        assert snapshot.rows("users") == []

    def test_add_rows_keeps_order(self):
        """Test rows come back in insertion order."""
        snapshot = Snapshot()
        snapshot.add_rows("roles", [{"id": "r2"}, {"id": "r1"}])

        assert [r["id"] for r in snapshot.rows("roles")] == ["r2", "r1"]

    def test_rows_filtered_by_criteria(self, sample_snapshot):
        """Test rows() filters by exact column values."""
        inactive = sample_snapshot.rows("users", is_active=False)

        assert [r["id"] for r in inactive] == ["u2"]
        assert sample_snapshot.rows("users", id="u9") == []

    def test_first(self, sample_snapshot):
        """Test first() returns the first match or None."""
        assert sample_snapshot.first("roles", name="Admin")["id"] == "r1"
        assert sample_snapshot.first("roles", name="Guest") is None

    def test_rows_are_copies(self, sample_snapshot):
        """Test callers cannot mutate the snapshot through returned rows."""
        sample_snapshot.rows("roles")[0]["name"] = "Changed"
        assert sample_snapshot.first("roles")["name"] == "Admin"

    def test_counts(self, sample_snapshot):
        """Test per-table and total counts."""
        assert sample_snapshot.counts() == {"roles": 1, "users": 2, "user_roles": 1}
        assert sample_snapshot.row_count == 4

    def test_empty_table_equals_absent_table(self):
        """Test an empty table and an omitted table compare equal."""
        assert Snapshot({"roles": [], "users": [{"id": "u1"}]}) == Snapshot({"users": [{"id": "u1"}]})
        assert "roles" not in Snapshot({"roles": []})

    def test_row_order_is_not_significant(self):
        """Test the same rows in another order compare equal."""
        a = Snapshot({"roles": [{"id": "r1"}, {"id": "r2"}]})
        b = Snapshot({"roles": [{"id": "r2"}, {"id": "r1"}]})

        assert a == b
        assert a.rows("roles") != b.rows("roles")

    def test_inequality(self):
        """Test different rows or duplicate counts make snapshots differ."""
        a = Snapshot({"roles": [{"id": "r1"}, {"id": "r2"}]})

        assert a != Snapshot({"roles": [{"id": "r1"}, {"id": "r3"}]})
        assert a != Snapshot({"roles": [{"id": "r1"}, {"id": "r1"}]})
        assert a != Snapshot({"users": [{"id": "r1"}, {"id": "r2"}]})
        assert a != Snapshot()

    def test_contains_rows_of(self, sample_snapshot):
        """Test the superset check."""
        parent = Snapshot({"roles": [{"id": "r1", "name": "Admin"}]})

        assert sample_snapshot.contains_rows_of(parent)
        assert not parent.contains_rows_of(sample_snapshot)
        assert sample_snapshot.contains_rows_of(Snapshot())

    def test_to_dict_skips_empty_tables(self):
        """Test to_dict() only lists tables with rows."""
        snapshot = Snapshot({"roles": [], "users": [{"id": "u1"}]})
        assert snapshot.to_dict() == {"users": [{"id": "u1"}]}
