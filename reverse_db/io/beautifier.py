"""Markdown body formatting."""

from __future__ import annotations

import mdformat


class MarkdownBeautifier:
    """Pretty-prints Markdown bodies with mdformat.

    Formatting is idempotent, so re-running on an already formatted body
    leaves it byte-identical.
    """

    def beautify(self, text: str) -> str:
        if not text.strip():
            return ""
        return mdformat.text(text)
