"""Folding of index statistics rows into per-table index descriptors."""

from __future__ import annotations

from collections.abc import Iterable

from reverse_db.core.constants import (
    INDEX_NON_UNIQUE,
    INDEX_UNIQUE,
    PRIMARY_INDEX_NAME,
)
from reverse_db.core.exceptions import SchemaConsistencyError
from reverse_db.core.schemas import CanonicalTable, IndexDescriptor, RawIndexRow
from reverse_db.logger import logger


def merge_indexes(
    tables: dict[str, CanonicalTable], rows: Iterable[RawIndexRow]
) -> int:
    """Add each index row's column to its named index.

    Rows must arrive ordered by table and sequence in index; columns are
    appended as they come so composite indexes keep their positional order.
    The primary-key index is skipped since ``primary`` already lists it.

    Args:
        tables: Canonical tables keyed by table id
        rows: Index rows ordered by ``(TABLE_NAME, SEQ_IN_INDEX)``

    Returns:
        Number of index rows applied

    Raises:
        SchemaConsistencyError: If a row names an unknown table
    """
    applied = 0
    for row in rows:
        if row.non_unique == 0 and row.index_name == PRIMARY_INDEX_NAME:
            continue

        table = tables.get(row.table_name)
        if table is None:
            raise SchemaConsistencyError(
                f"Index row refers to unknown table '{row.table_name}'"
            )

        index_type = INDEX_UNIQUE if row.non_unique == 0 else INDEX_NON_UNIQUE
        index = table.indexes.get(row.index_name)
        if index is None:
            index = IndexDescriptor(type=index_type)
            table.indexes[row.index_name] = index
        else:
            index.type = index_type
        index.columns.append(row.column_name)
        applied += 1

    logger.debug("Applied %d index row(s)", applied)
    return applied
