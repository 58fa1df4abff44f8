"""In-memory snapshot of cataloged table content."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

Row = dict[str, Any]


class Snapshot:
    """Table name -> ordered rows, each row a column name -> value mapping.

    No uniqueness or foreign-key rules are enforced in memory; the database
    checks integrity during seeding. A table with no rows and an absent table
    are equivalent, and equality ignores row order within a table.
    """

    def __init__(self, tables: Mapping[str, Iterable[Mapping[str, Any]]] | None = None) -> None:
        self._tables: dict[str, list[Row]] = {}
        for name, rows in (tables or {}).items():
            self.add_rows(name, rows)

    def add_row(self, table: str, row: Mapping[str, Any]) -> None:
        self._tables.setdefault(table, []).append(dict(row))

    def add_rows(self, table: str, rows: Iterable[Mapping[str, Any]]) -> None:
        for row in rows:
            self.add_row(table, row)

    @property
    def table_names(self) -> tuple[str, ...]:
        """Names of tables holding at least one row."""
        return tuple(name for name, rows in self._tables.items() if rows)

    def rows(self, table: str, **criteria: Any) -> list[Row]:
        """Rows of a table, optionally filtered by exact column values.

        Args:
            table: Table name as it appears in the catalog.
            **criteria: Column name/value pairs every returned row must match.

        Returns:
            Copies of the matching rows, in snapshot order.
        """
        return [
            dict(row)
            for row in self._tables.get(table, [])
            if all(row.get(col) == value for col, value in criteria.items())
        ]

    def first(self, table: str, **criteria: Any) -> Row | None:
        """First row matching criteria, or None."""
        matches = self.rows(table, **criteria)
        return matches[0] if matches else None

    def counts(self) -> dict[str, int]:
        """Row count per non-empty table."""
        return {name: len(rows) for name, rows in self._tables.items() if rows}

    @property
    def row_count(self) -> int:
        return sum(len(rows) for rows in self._tables.values())

    def is_empty(self) -> bool:
        return self.row_count == 0

    def contains_rows_of(self, other: Snapshot) -> bool:
        """Check that every row of other is present here (superset check)."""
        for table in other.table_names:
            mine = self._tables.get(table, [])
            if any(row not in mine for row in other.rows(table)):
                return False
        return True

    def items(self) -> Iterator[tuple[str, list[Row]]]:
        for name in self.table_names:
            yield name, self.rows(name)

    def to_dict(self) -> dict[str, list[Row]]:
        return dict(self.items())

    def __contains__(self, table: object) -> bool:
        return table in self.table_names

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Snapshot):
            return NotImplemented
        if self.counts() != other.counts():
            return False
        return all(_same_rows(rows, other._tables[name]) for name, rows in self.items())

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Snapshot({self.counts()!r})"


def _same_rows(left: list[Row], right: list[Row]) -> bool:
    # Multiset comparison; values need not be hashable or mutually orderable
    remaining = list(right)
    for row in left:
        try:
            remaining.remove(row)
        except ValueError:
            return False
    return not remaining
