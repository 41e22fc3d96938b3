"""Core data models and shared types."""

from reverse_db.core.config import ExitCodesConfig, ReverseConfig
from reverse_db.core.exceptions import (
    ConfigurationError,
    DatabaseConnectionError,
    DocumentParseError,
    ReverseDbError,
    SchemaConsistencyError,
    UnknownFormatError,
    UnrecognizedConstraintShapeError,
    UnsafeTableIdError,
    ValidationError,
)
from reverse_db.core.schemas import (
    CanonicalColumn,
    CanonicalTable,
    ClassificationResult,
    RawColumn,
    RawCommentRow,
    RawForeignKeyRecord,
    RawIndexRow,
    RawSchema,
    ValidationResult,
)

__all__ = [
    "CanonicalColumn",
    "CanonicalTable",
    "ClassificationResult",
    "RawColumn",
    "RawCommentRow",
    "RawForeignKeyRecord",
    "RawIndexRow",
    "RawSchema",
    "ValidationResult",
    "ReverseDbError",
    "ConfigurationError",
    "DatabaseConnectionError",
    "SchemaConsistencyError",
    "UnrecognizedConstraintShapeError",
    "UnknownFormatError",
    "DocumentParseError",
    "UnsafeTableIdError",
    "ValidationError",
    "ExitCodesConfig",
    "ReverseConfig",
]
