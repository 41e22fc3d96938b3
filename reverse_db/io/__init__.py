"""Database collaborators and on-disk documents."""

from reverse_db.io.document_reconciler import DocumentCache, DocumentReconciler

__all__ = ["DocumentCache", "DocumentReconciler"]
