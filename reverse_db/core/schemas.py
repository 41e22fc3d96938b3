"""Pydantic models for raw introspection records and the canonical table model."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from reverse_db.core.constants import RELATION_TYPE


class RawModel(BaseModel):
    """Base for records produced by the database collaborators.

    Accepts both the camelCase keys used on the wire and Python field names.
    """

    model_config = ConfigDict(populate_by_name=True)


class RawColumnKeyInfo(RawModel):
    """Key details reported for a column, e.g. ``extra="auto_increment"``."""

    extra: str | None = None


class RawColumn(RawModel):
    """Per-table, per-column record from introspection."""

    type: str = Field(..., description="Raw column type, e.g. 'int(11)'")
    allow_null: bool = Field(True, alias="allowNull")
    primary_key: bool = Field(False, alias="primaryKey")
    default_value: Any = Field(None, alias="defaultValue")
    comment: str | None = None
    foreign_key: RawColumnKeyInfo | None = Field(None, alias="foreignKey")


class ForeignSources(RawModel):
    """Nested cross-reference repeating the column and target of a foreign key."""

    source_column: str | None = None
    target_table: str | None = None
    target_column: str | None = None


class RawForeignKeyRecord(RawModel):
    """Constraint record as reported by the schema introspector.

    A record is either a primary-key/unique constraint, a plain index (no
    target table or column) or a true foreign key. As reported by the
    introspector, ``source_table`` holds the schema name, not the table name;
    records are grouped by table id in RawSchema.foreign_keys.
    """

    is_primary_key: bool = Field(False, alias="isPrimaryKey")
    is_unique: bool = Field(False, alias="isUnique")
    is_foreign_key: bool = Field(False, alias="isForeignKey")
    source_schema: str | None = None
    source_table: str | None = None
    source_column: str | None = None
    target_schema: str | None = None
    target_table: str | None = None
    target_column: str | None = None
    foreign_sources: ForeignSources | None = Field(None, alias="foreignSources")


class RawSchema(RawModel):
    """Everything the schema introspector returns for one database."""

    tables: dict[str, dict[str, RawColumn]] = Field(default_factory=dict)
    foreign_keys: dict[str, dict[str, RawForeignKeyRecord]] = Field(
        default_factory=dict, alias="foreignKeys"
    )


class RawCommentRow(RawModel):
    """Column comment row from ``INFORMATION_SCHEMA.COLUMNS``."""

    table_name: str = Field(..., alias="TABLE_NAME")
    column_name: str = Field(..., alias="COLUMN_NAME")
    column_comment: str | None = Field(None, alias="COLUMN_COMMENT")


class RawIndexRow(RawModel):
    """Index column row from ``INFORMATION_SCHEMA.STATISTICS``."""

    table_name: str = Field(..., alias="TABLE_NAME")
    index_name: str = Field(..., alias="INDEX_NAME")
    column_name: str = Field(..., alias="COLUMN_NAME")
    seq_in_index: int = Field(..., alias="SEQ_IN_INDEX")
    non_unique: int = Field(..., alias="NON_UNIQUE")


class CanonicalModel(BaseModel):
    """Base for the canonical model, serialized with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)


class NormalizedType(CanonicalModel):
    """Base type and optional length parsed from a raw type string."""

    type: str
    length: int | None = None


class CanonicalColumn(CanonicalModel):
    """Format-independent description of one column.

    Optional fields are ``None`` when absent and are omitted on output.
    """

    name: str
    type: str
    length: int | None = None
    not_null: bool | None = Field(None, alias="notNull")
    auto_increment: bool | None = Field(None, alias="autoIncrement")
    default_value: Any = Field(None, alias="defaultValue")


class IndexDescriptor(CanonicalModel):
    """Named index with its columns in positional order."""

    type: Literal["unique", "non-unique"]
    columns: list[str] = Field(default_factory=list)


class ForeignKeyReference(CanonicalModel):
    """Target side of a foreign key."""

    table_id: str = Field(..., alias="tableId")
    columns: list[str]


class ForeignKeyDescriptor(CanonicalModel):
    """Single-column many-to-one foreign key."""

    columns: list[str]
    references: ForeignKeyReference
    relation_type: str = Field(RELATION_TYPE, alias="relationType")


class CanonicalTable(CanonicalModel):
    """Format-independent description of one table."""

    id: str
    name: str = ""
    category: str = ""
    description: str = ""
    columns: dict[str, CanonicalColumn] = Field(default_factory=dict)
    primary: list[str] = Field(default_factory=list)
    indexes: dict[str, IndexDescriptor] = Field(default_factory=dict)
    foreign_keys: dict[str, ForeignKeyDescriptor] = Field(
        default_factory=dict, alias="foreignKeys"
    )

    @model_validator(mode="after")
    def default_name_to_id(self) -> CanonicalTable:
        """Use the table id as display name when none is given."""
        if not self.name:
            self.name = self.id
        return self

    def to_document(self) -> dict[str, Any]:
        """Return the plain dictionary written into output documents."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ValidationResult(BaseModel):
    """Result of document validation with type safety."""

    is_valid: bool = Field(..., description="Whether the document passed validation")
    errors: list[str] = Field(
        default_factory=list, description="Validation error messages"
    )
    warnings: list[str] = Field(
        default_factory=list, description="Validation warning messages"
    )

    def add_error(self, message: str) -> None:
        """Add an error message to the validation result."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning message to the validation result."""
        self.warnings.append(message)


class ClassificationResult(ValidationResult):
    """Outcome of foreign-key classification.

    ``registered`` counts the foreign keys added to the canonical tables.
    """

    registered: int = Field(0, description="Number of foreign keys registered")
