"""Table catalog: the fixed, ordered set of tables the fixture engine manages."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Literal, get_args

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    Time,
)
from sqlalchemy.types import TypeEngine

from fixtureforge.core.exceptions import CatalogConfigError

ColumnType = Literal[
    "string",
    "text",
    "integer",
    "bigint",
    "decimal",
    "float",
    "boolean",
    "date",
    "datetime",
    "datetime_tz",
    "time",
]

COLUMN_TYPES: tuple[str, ...] = get_args(ColumnType)

_SQL_TYPES: dict[str, Callable[[], TypeEngine[object]]] = {
    "string": String,
    "text": Text,
    "integer": Integer,
    "bigint": BigInteger,
    "decimal": lambda: Numeric(asdecimal=True),
    "float": Float,
    "boolean": Boolean,
    "date": Date,
    "datetime": DateTime,
    "datetime_tz": lambda: DateTime(timezone=True),
    "time": Time,
}

# Names become XML element tags in snapshot files
_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_\-]*(\.[A-Za-z_][A-Za-z0-9_\-]*)?$")


def _check_name(kind: str, name: str) -> None:
    if not _NAME_PATTERN.match(name):
        raise CatalogConfigError(
            f"Invalid {kind} name '{name}': must be usable as an XML element name",
            details={kind: name},
        )


@dataclass(frozen=True)
class ColumnDescriptor:
    """A cataloged column and the value type its snapshot text decodes to."""

    name: str
    type: ColumnType = "string"

    def __post_init__(self) -> None:
        _check_name("column", self.name)
        if "." in self.name:
            raise CatalogConfigError(
                f"Invalid column name '{self.name}': columns cannot be qualified",
                details={"column": self.name},
            )
        if self.type not in COLUMN_TYPES:
            raise CatalogConfigError(
                f"Unknown column type '{self.type}' for column '{self.name}'",
                details={"column": self.name, "type": self.type},
            )

    def sql_type(self) -> TypeEngine[object]:
        """SQLAlchemy type used when reading and inserting this column."""
        return _SQL_TYPES[self.type]()


@dataclass(frozen=True)
class TableDescriptor:
    """A cataloged table.

    Attributes:
        name: Table name, optionally schema-qualified ("schema.table").
        columns: Ordered column descriptors.
        key: Columns used to order rows on read. Defaults to every column.
    """

    name: str
    columns: tuple[ColumnDescriptor, ...]
    key: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        _check_name("table", self.name)
        if not self.columns:
            raise CatalogConfigError(
                f"Table '{self.name}' declares no columns",
                details={"table": self.name},
            )
        names = [c.name for c in self.columns]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise CatalogConfigError(
                f"Table '{self.name}' declares duplicate columns: {duplicates}",
                details={"table": self.name, "columns": duplicates},
            )
        unknown_keys = [k for k in self.key if k not in names]
        if unknown_keys:
            raise CatalogConfigError(
                f"Table '{self.name}' key references unknown columns: {unknown_keys}",
                details={"table": self.name, "columns": unknown_keys},
            )

    @property
    def schema(self) -> str | None:
        """Schema part of the qualified name, if any."""
        return self.name.split(".", 1)[0] if "." in self.name else None

    @property
    def table_name(self) -> str:
        """Unqualified table name."""
        return self.name.split(".", 1)[-1]

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.columns)

    @property
    def order_by(self) -> tuple[str, ...]:
        """Columns that give rows a stable order on read."""
        return self.key or self.column_names

    def column(self, name: str) -> ColumnDescriptor | None:
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def to_table(self, metadata: MetaData) -> Table:
        """Build a lightweight SQLAlchemy Core table for this descriptor."""
        return Table(
            self.table_name,
            metadata,
            *(Column(c.name, c.sql_type()) for c in self.columns),
            schema=self.schema,
        )


class Catalog:
    """Ordered, immutable registry of the tables known to the fixture engine.

    Order matters only for pairing disable/enable calls and for producing
    stable snapshot files; it carries no foreign-key meaning.
    """

    def __init__(self, tables: Iterable[TableDescriptor]) -> None:
        self._tables = tuple(tables)
        self._by_name: dict[str, TableDescriptor] = {}
        for table in self._tables:
            if table.name in self._by_name:
                raise CatalogConfigError(
                    f"Table '{table.name}' is declared more than once",
                    details={"table": table.name},
                )
            self._by_name[table.name] = table

        self._metadata = MetaData()
        self._sql_tables = {t.name: t.to_table(self._metadata) for t in self._tables}

    def list_tables(self) -> tuple[TableDescriptor, ...]:
        """All cataloged tables in declared order."""
        return self._tables

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(t.name for t in self._tables)

    def get(self, name: str) -> TableDescriptor | None:
        return self._by_name.get(name)

    def sql_table(self, name: str) -> Table:
        """SQLAlchemy Core table for a cataloged table name."""
        return self._sql_tables[name]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[TableDescriptor]:
        return iter(self._tables)

    def __len__(self) -> int:
        return len(self._tables)

    def __repr__(self) -> str:
        return f"Catalog({list(self.names)!r})"
