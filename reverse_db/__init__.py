"""
reverse-db

A Python package that documents an existing relational database as one file
per table (YAML, JSON or Markdown with front matter), refreshing the generated
schema section while keeping everything people wrote by hand.
"""

from reverse_db.cli.generator import DocumentGenerator
from reverse_db.pipeline import reverse

__all__ = ["DocumentGenerator", "reverse"]
