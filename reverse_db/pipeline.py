"""The reverse pipeline: database schema in, one document per table out."""

from __future__ import annotations

from pathlib import Path

from reverse_db.core.config import ReverseConfig
from reverse_db.core.exceptions import UnrecognizedConstraintShapeError
from reverse_db.core.schemas import CanonicalTable
from reverse_db.io.database import Collaborators
from reverse_db.io.document_reconciler import DocumentCache, DocumentReconciler
from reverse_db.logger import logger
from reverse_db.reconciliation.comment_merger import merge_comments
from reverse_db.reconciliation.index_merger import merge_indexes
from reverse_db.reconciliation.table_projector import project_tables
from reverse_db.validation.foreign_key_classifier import ForeignKeyClassifier


class ReverseContext:
    """State owned by a single reverse run.

    Built at the start of every run and dropped at its end, so nothing read
    from the output directory leaks into the next run.
    """

    def __init__(self, config: ReverseConfig, collaborators: Collaborators) -> None:
        self.config = config
        self.collaborators = collaborators
        self.cache = DocumentCache()
        self.reconciler = DocumentReconciler(
            output_dir=config.output,
            format_name=config.format,
            beautifier=collaborators.beautifier,
            cache=self.cache,
        )


def build_tables(context: ReverseContext) -> dict[str, CanonicalTable]:
    """Read the database and build the canonical tables.

    Schema, comments and indexes are read one after another; comments and
    indexes are merged into the model the schema produced.

    Raises:
        DatabaseConnectionError: If any retrieval step fails
        SchemaConsistencyError: If comment or index rows name unknown tables/columns
        UnrecognizedConstraintShapeError: If a constraint record cannot be classified
    """
    collaborators = context.collaborators
    table_filter = context.config.tables

    raw_schema = collaborators.introspector.read_schema(table_filter)
    comments = collaborators.comment_reader.read_comments(table_filter)
    merge_comments(raw_schema.tables, comments)

    tables = project_tables(raw_schema.tables)

    indexes = collaborators.index_reader.read_indexes(table_filter)
    merge_indexes(tables, indexes)

    result = ForeignKeyClassifier().classify(tables, raw_schema.foreign_keys)
    if not result.is_valid:
        raise UnrecognizedConstraintShapeError(result.errors)
    logger.info(
        "Built %d table(s) with %d foreign key(s)", len(tables), result.registered
    )
    return tables


def reverse(
    config: ReverseConfig, collaborators: Collaborators | None = None
) -> list[Path]:
    """Document every table of the configured database.

    Args:
        config: Settings for this run
        collaborators: Database and formatting services; SQLAlchemy-backed
            ones are created from ``config`` (and disposed afterwards) when omitted

    Returns:
        Paths of the documents written, one per table

    Raises:
        ReverseDbError: If any step of the run fails; documents already
            written for earlier tables stay on disk
    """
    owns_collaborators = collaborators is None
    if collaborators is None:
        collaborators = Collaborators.from_config(config)

    try:
        context = ReverseContext(config, collaborators)
        tables = build_tables(context)

        written: list[Path] = []
        for table in tables.values():
            logger.info("Reconciling table %s", table.id)
            written.append(context.reconciler.reconcile(table))
        return written
    finally:
        if owns_collaborators:
            collaborators.close()
