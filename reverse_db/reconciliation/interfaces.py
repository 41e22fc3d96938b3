from collections.abc import Sequence
from typing import Protocol

from reverse_db.core.schemas import RawCommentRow, RawIndexRow, RawSchema


class ISchemaIntrospector(Protocol):
    def read_schema(self, tables: Sequence[str] | None = None) -> RawSchema: ...


class ICommentReader(Protocol):
    def read_comments(
        self, tables: Sequence[str] | None = None
    ) -> list[RawCommentRow]: ...


class IIndexReader(Protocol):
    def read_indexes(
        self, tables: Sequence[str] | None = None
    ) -> list[RawIndexRow]: ...


class IBodyBeautifier(Protocol):
    def beautify(self, text: str) -> str: ...
