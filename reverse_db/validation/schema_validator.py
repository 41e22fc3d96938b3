"""Validation of generated table documents against a JSON Schema."""

from __future__ import annotations

from typing import Any

from jsonschema import Draft7Validator

from reverse_db.core.constants import INDEX_NON_UNIQUE, INDEX_UNIQUE, RELATION_TYPE
from reverse_db.core.schemas import ValidationResult

_COLUMN_LIST = {"type": "array", "items": {"type": "string"}}

TABLE_DOCUMENT_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Table document",
    "type": "object",
    "required": ["id", "name", "columns", "primary", "indexes", "foreignKeys"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "name": {"type": "string"},
        "category": {"type": "string"},
        "description": {"type": "string"},
        "columns": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["name", "type"],
                "properties": {
                    "name": {"type": "string"},
                    "type": {"type": "string"},
                    "length": {"type": "integer"},
                    "notNull": {"const": False},
                    "autoIncrement": {"const": True},
                },
            },
        },
        "primary": _COLUMN_LIST,
        "indexes": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["type", "columns"],
                "properties": {
                    "type": {"enum": [INDEX_UNIQUE, INDEX_NON_UNIQUE]},
                    "columns": {**_COLUMN_LIST, "minItems": 1},
                },
            },
        },
        "foreignKeys": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["columns", "references", "relationType"],
                "properties": {
                    "columns": {**_COLUMN_LIST, "minItems": 1, "maxItems": 1},
                    "references": {
                        "type": "object",
                        "required": ["tableId", "columns"],
                        "properties": {
                            "tableId": {"type": "string"},
                            "columns": {**_COLUMN_LIST, "minItems": 1, "maxItems": 1},
                        },
                    },
                    "relationType": {"const": RELATION_TYPE},
                },
            },
        },
    },
}


class SchemaValidator:
    """Validates generated table documents.

    Checks the document shape against TABLE_DOCUMENT_SCHEMA (JSON Schema Draft 7)
    and cross-checks that every column referenced by the primary key, the
    indexes and the foreign keys is a column of the table.
    """

    def __init__(self) -> None:
        self._validator = Draft7Validator(TABLE_DOCUMENT_SCHEMA)

    def validate_table_document(self, document: dict[str, Any]) -> ValidationResult:
        """Validate one table document.

        Args:
            document: Table document as produced by CanonicalTable.to_document()

        Returns:
            ValidationResult with validation status and any errors/warnings
        """
        result = ValidationResult(is_valid=True)

        for error in sorted(self._validator.iter_errors(document), key=str):
            location = "/".join(str(part) for part in error.absolute_path)
            result.add_error(f"{location or '<root>'}: {error.message}")

        if result.is_valid:
            self._validate_column_references(document, result)
            self._validate_structure(document, result)

        return result

    def _validate_column_references(
        self, document: dict[str, Any], result: ValidationResult
    ) -> None:
        """Check that key and index columns exist on the table.

        Args:
            document: Table document to check
            result: Result to append errors to
        """
        columns = document["columns"]
        table_id = document["id"]

        for column_id in document["primary"]:
            if column_id not in columns:
                result.add_error(
                    f"{table_id}: primary key column '{column_id}' is not a column"
                )

        for index_name, index in document["indexes"].items():
            for column_id in index["columns"]:
                if column_id not in columns:
                    result.add_error(
                        f"{table_id}: index '{index_name}' names unknown column "
                        f"'{column_id}'"
                    )

        for fk_name, foreign_key in document["foreignKeys"].items():
            for column_id in foreign_key["columns"]:
                if column_id not in columns:
                    result.add_error(
                        f"{table_id}: foreign key '{fk_name}' names unknown column "
                        f"'{column_id}'"
                    )

    def _validate_structure(
        self, document: dict[str, Any], result: ValidationResult
    ) -> None:
        """Record warnings for tables that are valid but unusual."""
        if not document["columns"]:
            result.add_warning(f"{document['id']}: table has no columns")
        if not document["primary"]:
            result.add_warning(f"{document['id']}: table has no primary key")
