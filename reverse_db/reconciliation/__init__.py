"""Normalization of raw introspection data into canonical tables."""

from reverse_db.reconciliation.comment_merger import merge_comments
from reverse_db.reconciliation.index_merger import merge_indexes
from reverse_db.reconciliation.table_projector import project_tables
from reverse_db.reconciliation.type_normalizer import normalize_type

__all__ = ["merge_comments", "merge_indexes", "normalize_type", "project_tables"]
