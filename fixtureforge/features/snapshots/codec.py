"""Text and XML encoding of snapshots.

File layout (one element per row, one child per non-null column):

    <?xml version='1.0' encoding='utf-8'?>
    <AppSchema>
      <app.roles>
        <id>r1</id>
        <name>Admin</name>
      </app.roles>
    </AppSchema>

Values are stored as text and decoded using the column type declared in the
catalog. Null columns are omitted; an empty element is an empty string.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any

from fixtureforge.core.exceptions import SchemaMismatchError, SnapshotFormatError
from fixtureforge.features.catalog import Catalog, ColumnType
from fixtureforge.features.snapshots.models import Snapshot

# Characters XML 1.0 cannot represent, even escaped
_INVALID_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")

_TRUE = {"true", "1"}
_FALSE = {"false", "0"}


def encode_value(value: Any) -> str:
    """Render a column value as snapshot text.

    Args:
        value: Non-null value read from the database or built in memory.

    Returns:
        Text form (ISO-8601 for temporal values, true/false for booleans).

    Raises:
        SnapshotFormatError: For binary values or text XML cannot hold.
    """
    if isinstance(value, bool):
        text = "true" if value else "false"
    elif isinstance(value, (datetime, date, time)):
        text = value.isoformat()
    elif isinstance(value, float):
        text = repr(value)
    elif isinstance(value, (bytes, bytearray, memoryview)):
        raise SnapshotFormatError("Binary column values are not supported in snapshots")
    else:
        text = str(value)

    if _INVALID_XML_CHARS.search(text):
        raise SnapshotFormatError(
            f"Value {text!r} contains characters that cannot be stored in XML",
        )
    return text


def decode_value(text: str, column_type: ColumnType) -> Any:
    """Parse snapshot text back into a value of the declared column type.

    Raises:
        SnapshotFormatError: If the text is not valid for the type.
    """
    try:
        if column_type in ("string", "text"):
            return text
        if column_type in ("integer", "bigint"):
            return int(text)
        if column_type == "decimal":
            return Decimal(text)
        if column_type == "float":
            return float(text)
        if column_type == "boolean":
            lowered = text.strip().lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
            raise ValueError(f"not a boolean: {text!r}")
        if column_type == "date":
            return date.fromisoformat(text)
        if column_type in ("datetime", "datetime_tz"):
            return datetime.fromisoformat(text)
        if column_type == "time":
            return time.fromisoformat(text)
    except (ValueError, InvalidOperation) as e:
        raise SnapshotFormatError(
            f"Cannot decode {text!r} as {column_type}: {e}",
            details={"text": text, "type": column_type},
        ) from e
    raise SnapshotFormatError(f"Unknown column type '{column_type}'")


def check_tables_cataloged(snapshot: Snapshot, catalog: Catalog) -> None:
    """Fail when a snapshot holds tables or columns the catalog lacks."""
    for table_name in snapshot.table_names:
        table = catalog.get(table_name)
        if table is None:
            raise SchemaMismatchError(
                f"Snapshot table '{table_name}' is not in the catalog",
                details={"table": table_name},
            )
        known = set(table.column_names)
        for row in snapshot.rows(table_name):
            unknown = sorted(set(row) - known)
            if unknown:
                raise SchemaMismatchError(
                    f"Snapshot table '{table_name}' has columns not in the catalog: {unknown}",
                    details={"table": table_name, "columns": unknown},
                )


def snapshot_to_xml(snapshot: Snapshot, catalog: Catalog, root_element: str = "AppSchema") -> bytes:
    """Serialize a snapshot deterministically.

    Tables follow catalog order and columns follow each table's declared
    order, so identical content always yields identical bytes.
    """
    check_tables_cataloged(snapshot, catalog)

    root = ET.Element(root_element)
    for table in catalog.list_tables():
        for row in snapshot.rows(table.name):
            row_element = ET.SubElement(root, table.name)
            for column in table.column_names:
                value = row.get(column)
                if value is None:
                    continue
                ET.SubElement(row_element, column).text = encode_value(value)

    ET.indent(root, space="  ")
    data = ET.tostring(root, encoding="utf-8", xml_declaration=True)
    # Parsers fold raw carriage returns into newlines; only values can hold one
    return data.replace(b"\r", b"&#13;") + b"\n"


def snapshot_from_xml(data: bytes, catalog: Catalog) -> Snapshot:
    """Parse a snapshot document.

    Cataloged tables missing from the document are empty. Columns missing
    from a row element load as None.

    Raises:
        SnapshotFormatError: If the document is malformed.
        SchemaMismatchError: If it references tables/columns not in the catalog.
    """
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise SnapshotFormatError(f"Snapshot is not well-formed XML: {e}") from e

    snapshot = Snapshot()
    for row_element in root:
        table = catalog.get(row_element.tag)
        if table is None:
            raise SchemaMismatchError(
                f"Snapshot table '{row_element.tag}' is not in the catalog",
                details={"table": row_element.tag},
            )

        values: dict[str, Any] = {}
        for column_element in row_element:
            column = table.column(column_element.tag)
            if column is None:
                raise SchemaMismatchError(
                    f"Snapshot column '{table.name}.{column_element.tag}' is not in the catalog",
                    details={"table": table.name, "column": column_element.tag},
                )
            if column.name in values:
                raise SnapshotFormatError(
                    f"Column '{column.name}' appears twice in a '{table.name}' row",
                    details={"table": table.name, "column": column.name},
                )
            if len(column_element):
                raise SnapshotFormatError(
                    f"Column '{table.name}.{column.name}' must hold text, not elements",
                    details={"table": table.name, "column": column.name},
                )
            values[column.name] = decode_value(column_element.text or "", column.type)

        snapshot.add_row(table.name, {name: values.get(name) for name in table.column_names})

    return snapshot
