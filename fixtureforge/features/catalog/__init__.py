"""Table catalog feature: the declared tables and columns under fixture control."""

from fixtureforge.features.catalog.models import (
    COLUMN_TYPES,
    Catalog,
    ColumnDescriptor,
    ColumnType,
    TableDescriptor,
)
from fixtureforge.features.catalog.service import (
    build_catalog,
    catalog_from_metadata,
    load_catalog,
    verify_live_schema,
)

__all__ = [
    "COLUMN_TYPES",
    "Catalog",
    "ColumnDescriptor",
    "ColumnType",
    "TableDescriptor",
    "build_catalog",
    "catalog_from_metadata",
    "load_catalog",
    "verify_live_schema",
]
