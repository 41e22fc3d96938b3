"""Command line interface."""

from reverse_db.cli.generator import DocumentGenerator, main

__all__ = ["DocumentGenerator", "main"]
