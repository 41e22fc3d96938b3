"""Structural validation of constraint records and generated documents."""

from reverse_db.validation.foreign_key_classifier import ForeignKeyClassifier
from reverse_db.validation.schema_validator import SchemaValidator

__all__ = ["ForeignKeyClassifier", "SchemaValidator"]
