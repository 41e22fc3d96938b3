"""Classification of raw constraint records into foreign-key descriptors."""

from __future__ import annotations

from reverse_db.core.schemas import (
    CanonicalTable,
    ClassificationResult,
    ForeignKeyDescriptor,
    ForeignKeyReference,
    RawForeignKeyRecord,
)
from reverse_db.logger import logger

# Fields that must agree between a record and its nested foreignSources
_MIRRORED_FIELDS = ("source_column", "target_table", "target_column")


class ForeignKeyClassifier:
    """Folds raw constraint records into per-table foreign keys.

    The introspection layer reports primary keys, unique constraints, plain
    indexes and foreign keys through one record type. Anything that is not
    clearly one of those shapes is reported as an error instead of guessed.
    Every foreign key is registered with the fixed relation type ``0N:1``.
    """

    def classify(
        self,
        tables: dict[str, CanonicalTable],
        raw_foreign_keys: dict[str, dict[str, RawForeignKeyRecord]],
    ) -> ClassificationResult:
        """Classify every record and register the foreign keys.

        Indexes must already be merged into ``tables``, because plain-index
        records are checked against them.

        Args:
            tables: Canonical tables keyed by table id, mutated in place
            raw_foreign_keys: Constraint records keyed by table id, then constraint name

        Returns:
            ClassificationResult; ``is_valid`` is False when any record was rejected
        """
        result = ClassificationResult(is_valid=True)

        for table_id, records in raw_foreign_keys.items():
            table = tables.get(table_id)
            if table is None:
                if records:
                    result.add_error(
                        f"Constraints reported for unknown table '{table_id}'"
                    )
                continue

            for constraint_name, record in records.items():
                descriptor, errors = self.classify_record(
                    table, constraint_name, record
                )
                for error in errors:
                    result.add_error(error)
                if descriptor is not None:
                    table.foreign_keys[constraint_name] = descriptor
                    result.registered += 1

        logger.debug(
            "Classified constraints: %d foreign key(s), %d error(s)",
            result.registered,
            len(result.errors),
        )
        return result

    def classify_record(
        self, table: CanonicalTable, constraint_name: str, record: RawForeignKeyRecord
    ) -> tuple[ForeignKeyDescriptor | None, list[str]]:
        """Classify one record.

        Returns:
            The foreign key to register (None for skipped records) and the
            reasons the record was rejected; a rejected record registers nothing
        """
        label = f"{table.id}.{constraint_name}"

        # Primary keys and unique constraints are represented elsewhere
        if record.is_primary_key or record.is_unique:
            return None, []

        if record.target_table is None and record.target_column is None:
            if constraint_name in table.indexes:
                return None, []
            return None, [
                f"{label}: unrecognized constraint shape "
                "(no target and no index of the same name)"
            ]

        if not record.is_foreign_key:
            return None, [
                f"{label}: unrecognized constraint shape (not a foreign key)"
            ]

        errors: list[str] = []
        # source_table carries the schema name; all three must name one schema
        if record.source_table != record.source_schema:
            errors.append(
                f"{label}: source table '{record.source_table}' does not match "
                f"source schema '{record.source_schema}'"
            )
        if record.source_table != record.target_schema:
            errors.append(
                f"{label}: source table '{record.source_table}' does not match "
                f"target schema '{record.target_schema}'"
            )
        errors.extend(self._check_foreign_sources(label, record))

        source_column = record.source_column
        target_table = record.target_table
        target_column = record.target_column
        if source_column is None:
            errors.append(f"{label}: foreign key has no source column")
        elif source_column not in table.columns:
            errors.append(f"{label}: source column '{source_column}' is not a column")
        if target_table is None or target_column is None:
            errors.append(f"{label}: foreign key target is incomplete")

        if errors or None in (source_column, target_table, target_column):
            return None, errors
        return (
            ForeignKeyDescriptor(
                columns=[source_column],
                references=ForeignKeyReference(
                    table_id=target_table, columns=[target_column]
                ),
            ),
            [],
        )

    def _check_foreign_sources(
        self, label: str, record: RawForeignKeyRecord
    ) -> list[str]:
        if record.foreign_sources is None:
            return [f"{label}: missing foreignSources cross-reference"]

        errors = []
        for field in _MIRRORED_FIELDS:
            flat = getattr(record, field)
            nested = getattr(record.foreign_sources, field)
            if flat != nested:
                errors.append(
                    f"{label}: {field} '{flat}' does not match "
                    f"foreignSources.{field} '{nested}'"
                )
        return errors
