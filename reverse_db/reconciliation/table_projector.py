"""Projection of raw introspection records onto the canonical table model."""

from __future__ import annotations

from reverse_db.core.constants import AUTO_INCREMENT
from reverse_db.core.schemas import CanonicalColumn, CanonicalTable, RawColumn
from reverse_db.reconciliation.type_normalizer import normalize_type


def project_column(column_id: str, raw: RawColumn) -> CanonicalColumn:
    """Build the canonical description of one column.

    Args:
        column_id: Column identifier
        raw: Introspected column record, comment already merged

    Returns:
        CanonicalColumn with only the meaningful optional fields set
    """
    normalized = normalize_type(raw.type)
    column = CanonicalColumn(
        name=raw.comment if raw.comment else column_id,
        type=normalized.type,
        length=normalized.length,
    )
    # Absence of notNull means the column is NOT NULL
    if raw.allow_null:
        column.not_null = False
    if raw.foreign_key is not None and raw.foreign_key.extra == AUTO_INCREMENT:
        column.auto_increment = True
    if raw.default_value is not None:
        column.default_value = raw.default_value
    return column


def project_table(table_id: str, raw_columns: dict[str, RawColumn]) -> CanonicalTable:
    """Build the canonical table for one introspected table.

    Column order and primary-key order follow the introspection order.
    """
    table = CanonicalTable(id=table_id)
    for column_id, raw in raw_columns.items():
        table.columns[column_id] = project_column(column_id, raw)
        if raw.primary_key:
            table.primary.append(column_id)
    return table


def project_tables(
    raw_tables: dict[str, dict[str, RawColumn]],
) -> dict[str, CanonicalTable]:
    """Project every introspected table, keyed by table id."""
    return {
        table_id: project_table(table_id, raw_columns)
        for table_id, raw_columns in raw_tables.items()
    }
