"""On-disk document formats for table documentation."""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Generic, TypeVar

import yaml
from pydantic import BaseModel, Field

from reverse_db.core.constants import FORMAT_FRONT_MATTER, FORMAT_JSON, FORMAT_YAML
from reverse_db.core.exceptions import (
    DocumentParseError,
    UnknownFormatError,
    UnsafeTableIdError,
)
from reverse_db.reconciliation.interfaces import IBodyBeautifier

FRONT_MATTER_PATTERN = re.compile(
    r"\A---\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)(.*)\Z", re.DOTALL | re.MULTILINE
)


class SimpleDocument(BaseModel):
    """YAML or JSON document whose whole content is the table description."""

    file_path: Path
    data: dict[str, Any] = Field(default_factory=dict)


class MarkdownDocument(BaseModel):
    """Markdown document with the table description in its front matter."""

    file_path: Path
    attributes: dict[str, Any] = Field(default_factory=dict)
    body: str = ""


Document = SimpleDocument | MarkdownDocument
DocumentT = TypeVar("DocumentT", SimpleDocument, MarkdownDocument)

# Characters and names that would escape the output directory
UNSAFE_FILE_NAME_CHARACTERS = ("/", "\\", "\0")
RESERVED_FILE_NAMES = ("", ".", "..")


def dump_yaml(data: Any) -> str:
    """Serialize to block-style YAML, keeping key order and non-ASCII text."""
    return yaml.safe_dump(
        data, allow_unicode=True, sort_keys=False, default_flow_style=False
    )


def load_yaml_mapping(path: Path, text: str) -> dict[str, Any]:
    """Parse YAML text that must hold a mapping.

    Raises:
        DocumentParseError: If the text is not valid YAML or not a mapping
    """
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DocumentParseError(path, f"invalid YAML: {e}") from e
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise DocumentParseError(path, "top level is not a mapping")
    return loaded


class DocumentFormat(ABC, Generic[DocumentT]):
    """How one output format stores a table description.

    Subclasses know the file extension, how to parse and render a document,
    and which field of the document carries the table description.
    """

    name: str
    extension: str

    @abstractmethod
    def parse(self, path: Path, content: str) -> DocumentT:
        """Parse existing file content.

        Raises:
            DocumentParseError: If the content cannot be parsed
        """

    @abstractmethod
    def new_document(self, path: Path, table_id: str, title: str) -> DocumentT:
        """Create an empty document for a table seen for the first time."""

    @abstractmethod
    def get_schema(self, document: DocumentT) -> dict[str, Any]:
        """Return the table description held by the document."""

    @abstractmethod
    def set_schema(self, document: DocumentT, schema: dict[str, Any]) -> None:
        """Replace the table description held by the document."""

    @abstractmethod
    def render(self, document: DocumentT) -> str:
        """Render the full file content."""

    def table_id(self, document: DocumentT) -> str | None:
        """Return the table id stored inside the document, if recoverable."""
        table_id = self.get_schema(document).get("id")
        if isinstance(table_id, str) and table_id:
            return table_id
        return None

    def file_name(self, table_id: str) -> str:
        """Return the document file name for a table.

        Raises:
            UnsafeTableIdError: If the id would place the file outside the
                output directory
        """
        if table_id in RESERVED_FILE_NAMES or any(
            character in table_id for character in UNSAFE_FILE_NAME_CHARACTERS
        ):
            raise UnsafeTableIdError(table_id)
        return f"{table_id}{self.extension}"


class SimpleFormat(DocumentFormat[SimpleDocument]):
    """Shared behaviour of the YAML and JSON formats."""

    def new_document(self, path: Path, table_id: str, title: str) -> SimpleDocument:
        return SimpleDocument(file_path=path)

    def get_schema(self, document: SimpleDocument) -> dict[str, Any]:
        return document.data

    def set_schema(self, document: SimpleDocument, schema: dict[str, Any]) -> None:
        document.data = schema


class YamlFormat(SimpleFormat):
    name = FORMAT_YAML
    extension = ".yml"

    def parse(self, path: Path, content: str) -> SimpleDocument:
        return SimpleDocument(file_path=path, data=load_yaml_mapping(path, content))

    def render(self, document: SimpleDocument) -> str:
        return dump_yaml(document.data)


class JsonFormat(SimpleFormat):
    name = FORMAT_JSON
    extension = ".json"

    def parse(self, path: Path, content: str) -> SimpleDocument:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise DocumentParseError(path, f"invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise DocumentParseError(path, "top level is not an object")
        return SimpleDocument(file_path=path, data=data)

    def render(self, document: SimpleDocument) -> str:
        content = json.dumps(document.data, indent=2, ensure_ascii=False)
        return content + "\n"


class FrontMatterFormat(DocumentFormat[MarkdownDocument]):
    """Markdown with a YAML front matter block.

    The table description lives under ``schema`` in the front matter; the
    Markdown body belongs to humans and is only passed through the beautifier.
    """

    name = FORMAT_FRONT_MATTER
    extension = ".md"

    def __init__(self, beautifier: IBodyBeautifier) -> None:
        self.beautifier = beautifier

    def parse(self, path: Path, content: str) -> MarkdownDocument:
        match = FRONT_MATTER_PATTERN.match(content)
        if match is None:
            raise DocumentParseError(path, "no front matter block")
        attributes = load_yaml_mapping(path, match.group(1))
        body = match.group(2).lstrip("\r\n")
        return MarkdownDocument(file_path=path, attributes=attributes, body=body)

    def new_document(self, path: Path, table_id: str, title: str) -> MarkdownDocument:
        return MarkdownDocument(
            file_path=path,
            attributes={"docId": table_id, "title": title, "schema": {"id": table_id}},
        )

    def get_schema(self, document: MarkdownDocument) -> dict[str, Any]:
        schema = document.attributes.get("schema")
        return schema if isinstance(schema, dict) else {}

    def set_schema(self, document: MarkdownDocument, schema: dict[str, Any]) -> None:
        document.attributes["schema"] = schema

    def render(self, document: MarkdownDocument) -> str:
        front_matter = dump_yaml(document.attributes)
        body = self.beautifier.beautify(document.body)
        return f"---\n{front_matter}---\n\n{body}"


def get_format(name: str, beautifier: IBodyBeautifier) -> DocumentFormat[Any]:
    """Return the document format for a format selector.

    Args:
        name: One of ``yaml``, ``json`` or ``front-matter``
        beautifier: Markdown body formatter used by the front-matter format

    Raises:
        UnknownFormatError: If the selector is not supported
    """
    if name == FORMAT_YAML:
        return YamlFormat()
    if name == FORMAT_JSON:
        return JsonFormat()
    if name == FORMAT_FRONT_MATTER:
        return FrontMatterFormat(beautifier)
    raise UnknownFormatError(name)
