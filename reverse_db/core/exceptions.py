"""Custom exception classes for the reverse-db document generator."""

from __future__ import annotations

from pathlib import Path


class ReverseDbError(Exception):
    """Base exception for reverse-db errors.

    All custom exceptions in the reverse-db document generator inherit from this class.
    """

    pass


class ConfigurationError(ReverseDbError):
    """Error in application configuration.

    Raised when required configuration values are missing or invalid,
    such as a missing database name in both the environment and the command line.

    Args:
        variable_name: The name of the configuration variable that caused the error
    """

    def __init__(self, variable_name: str) -> None:
        self.variable_name = variable_name
        message = f"Required configuration variable '{variable_name}' is not set"
        super().__init__(message)


class DatabaseConnectionError(ReverseDbError):
    """Error while talking to the database.

    Raised when schema, comment or index retrieval fails, for example because
    the server is unreachable or the credentials are rejected.

    Args:
        operation: The retrieval step that failed
        cause: The underlying exception raised by the database layer
    """

    def __init__(self, operation: str, cause: Exception) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"Failed to {operation}: {cause}")


class SchemaConsistencyError(ReverseDbError):
    """Error when out-of-band metadata names a table or column the schema lacks.

    Comment and index rows are fetched separately from the schema itself and
    must always refer to introspected tables and columns.
    """

    pass


class UnrecognizedConstraintShapeError(ReverseDbError):
    """Error when a raw constraint record has a shape the classifier cannot handle.

    Args:
        errors: List of classification error messages
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(f"Unrecognized constraint shape: {'; '.join(errors)}")


class UnknownFormatError(ReverseDbError):
    """Error when the output format selector is not supported.

    Args:
        format_name: The rejected format selector
    """

    def __init__(self, format_name: str) -> None:
        self.format_name = format_name
        super().__init__(f"Unknown output format '{format_name}'")


class DocumentParseError(ReverseDbError):
    """Error when an existing output document cannot be read back.

    Args:
        path: Path of the offending document
        reason: Human readable description of the problem
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed document '{path}': {reason}")


class ValidationError(ReverseDbError):
    """Error during document validation.

    Raised when a generated table document fails validation with one or more errors.

    Args:
        errors: List of validation error messages
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(f"Document validation failed: {'; '.join(errors)}")


class UnsafeTableIdError(ReverseDbError):
    """Error when a table id cannot be used as a document file name.

    Raised for ids containing path separators or naming a directory entry
    such as ``..``, which would place the document outside the output directory.

    Args:
        table_id: The rejected table id
    """

    def __init__(self, table_id: str) -> None:
        self.table_id = table_id
        super().__init__(f"Table id '{table_id}' cannot be used as a file name")
