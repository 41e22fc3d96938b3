"""Overlay of out-of-band column comments onto introspected columns."""

from __future__ import annotations

from collections.abc import Iterable

from reverse_db.core.exceptions import SchemaConsistencyError
from reverse_db.core.schemas import RawColumn, RawCommentRow
from reverse_db.logger import logger


def merge_comments(
    raw_tables: dict[str, dict[str, RawColumn]], rows: Iterable[RawCommentRow]
) -> int:
    """Set ``comment`` on each column named by a comment row.

    Args:
        raw_tables: Introspected columns keyed by table id, then column id
        rows: Comment rows; empty when the dialect has no comment support

    Returns:
        Number of comment rows applied

    Raises:
        SchemaConsistencyError: If a row names an unknown table or column
    """
    applied = 0
    for row in rows:
        table = raw_tables.get(row.table_name)
        if table is None:
            raise SchemaConsistencyError(
                f"Comment row refers to unknown table '{row.table_name}'"
            )
        column = table.get(row.column_name)
        if column is None:
            raise SchemaConsistencyError(
                f"Comment row refers to unknown column "
                f"'{row.table_name}.{row.column_name}'"
            )
        column.comment = row.column_comment
        applied += 1

    logger.debug("Applied %d column comment(s)", applied)
    return applied
