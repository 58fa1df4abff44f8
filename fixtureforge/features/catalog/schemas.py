"""Pydantic schemas for catalog documents."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from fixtureforge.features.catalog.models import ColumnType


class ColumnSpec(BaseModel):
    """A column entry in a catalog document."""

    name: str = Field(description="Column name")
    type: ColumnType = Field(default="string", description="Declared value type")


class TableSpec(BaseModel):
    """A table entry in a catalog document."""

    name: str = Field(description="Table name, optionally schema-qualified")
    columns: list[ColumnSpec] = Field(min_length=1, description="Ordered columns")
    key: list[str] = Field(
        default_factory=list,
        description="Columns used to order rows when reading the table",
    )

    @field_validator("columns", mode="before")
    @classmethod
    def expand_column_names(cls, v: Any) -> Any:
        """Allow plain column names as shorthand for string columns."""
        if isinstance(v, list):
            return [{"name": item} if isinstance(item, str) else item for item in v]
        return v


class CatalogSpec(BaseModel):
    """Root of a catalog document. Tables are listed in catalog order."""

    tables: list[TableSpec] = Field(min_length=1)
