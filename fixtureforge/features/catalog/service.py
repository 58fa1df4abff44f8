"""Catalog construction from YAML documents or SQLAlchemy metadata."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError
from sqlalchemy import (
    BigInteger,
    Boolean,
    Connection,
    Date,
    DateTime,
    Float,
    Integer,
    MetaData,
    Numeric,
    Text,
    Time,
    inspect,
)
from sqlalchemy.types import TypeEngine

from fixtureforge.core.exceptions import CatalogConfigError, SchemaMismatchError
from fixtureforge.core.logging import get_logger
from fixtureforge.features.catalog.models import (
    Catalog,
    ColumnDescriptor,
    ColumnType,
    TableDescriptor,
)
from fixtureforge.features.catalog.schemas import CatalogSpec

logger = get_logger(__name__)


def build_catalog(spec: CatalogSpec) -> Catalog:
    """Turn a validated catalog document into a Catalog.

    Args:
        spec: Parsed catalog document.

    Returns:
        Catalog with tables in document order.
    """
    return Catalog(
        TableDescriptor(
            name=table.name,
            columns=tuple(ColumnDescriptor(c.name, c.type) for c in table.columns),
            key=tuple(table.key),
        )
        for table in spec.tables
    )


def load_catalog(path: Path | str) -> Catalog:
    """Load the table catalog from a YAML file.

    Args:
        path: Path to YAML catalog file.

    Returns:
        Catalog loaded from file.

    Raises:
        FileNotFoundError: If catalog file doesn't exist.
        CatalogConfigError: If catalog file is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    with path.open(encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise CatalogConfigError(
                f"Catalog file {path} is not valid YAML: {e}",
                details={"path": str(path)},
            ) from e

    try:
        spec = CatalogSpec.model_validate(data or {})
    except ValidationError as e:
        raise CatalogConfigError(
            f"Catalog file {path} is invalid: {e}",
            details={"path": str(path), "errors": e.errors(include_url=False)},
        ) from e

    catalog = build_catalog(spec)
    logger.info("catalog.loaded", path=str(path), tables=len(catalog))
    return catalog


def _column_type(sql_type: TypeEngine[object]) -> ColumnType:
    # Subclasses first: BigInteger < Integer, Float < Numeric, Text < String
    if isinstance(sql_type, DateTime):
        return "datetime_tz" if sql_type.timezone else "datetime"
    if isinstance(sql_type, Date):
        return "date"
    if isinstance(sql_type, Time):
        return "time"
    if isinstance(sql_type, Boolean):
        return "boolean"
    if isinstance(sql_type, BigInteger):
        return "bigint"
    if isinstance(sql_type, Integer):
        return "integer"
    if isinstance(sql_type, Float):
        return "float"
    if isinstance(sql_type, Numeric):
        return "decimal"
    if isinstance(sql_type, Text):
        return "text"
    return "string"


def catalog_from_metadata(metadata: MetaData, schema: str | None = None) -> Catalog:
    """Derive a catalog from SQLAlchemy metadata.

    Tables are taken in dependency order (parents first) and primary keys
    become the read ordering keys.

    Args:
        metadata: Metadata holding the mapped tables.
        schema: Only include tables in this schema (None for all).

    Returns:
        Catalog mirroring the metadata.
    """
    descriptors: list[TableDescriptor] = []
    for table in metadata.sorted_tables:
        if schema is not None and table.schema != schema:
            continue
        name = f"{table.schema}.{table.name}" if table.schema else table.name
        descriptors.append(
            TableDescriptor(
                name=name,
                columns=tuple(ColumnDescriptor(c.name, _column_type(c.type)) for c in table.columns),
                key=tuple(c.name for c in table.primary_key.columns),
            )
        )
    return Catalog(descriptors)


def verify_live_schema(connection: Connection, catalog: Catalog) -> None:
    """Check every cataloged table and column exists in the live database.

    Args:
        connection: Open database connection.
        catalog: Catalog to verify.

    Raises:
        SchemaMismatchError: Listing every missing table and column.
    """
    inspector = inspect(connection)
    problems: list[str] = []

    for table in catalog:
        if not inspector.has_table(table.table_name, schema=table.schema):
            problems.append(f"table {table.name} is missing")
            continue
        live_columns = {
            c["name"].lower() for c in inspector.get_columns(table.table_name, schema=table.schema)
        }
        problems.extend(
            f"column {table.name}.{name} is missing"
            for name in table.column_names
            if name.lower() not in live_columns
        )

    if problems:
        logger.error("catalog.verify.failed", problems=problems)
        raise SchemaMismatchError(
            "Catalog does not match the live database: " + "; ".join(problems),
            details={"problems": problems},
        )
