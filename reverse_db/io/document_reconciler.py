"""Reconciliation of computed table descriptions with existing documents."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from reverse_db.core.exceptions import DocumentParseError, ValidationError
from reverse_db.core.schemas import CanonicalTable
from reverse_db.io.document_formats import Document, DocumentFormat, get_format
from reverse_db.logger import logger
from reverse_db.reconciliation.interfaces import IBodyBeautifier
from reverse_db.validation.schema_validator import SchemaValidator

# Schema fields written by humans that survive re-generation when non-empty
PRESERVED_FIELDS = ("category", "description")


class DocumentCache:
    """Existing documents of one run, keyed by the table id found in their content.

    ``documents`` is None until the output directory has been scanned.
    """

    def __init__(self) -> None:
        self.documents: dict[str, Document] | None = None
        self.rejected_paths: set[Path] = set()

    @property
    def is_scanned(self) -> bool:
        return self.documents is not None

    def reset(self) -> None:
        self.documents = None
        self.rejected_paths = set()


class DocumentReconciler:
    """Writes one document per table without losing human-authored content.

    On the first table of a run every existing document of the selected
    format is read and indexed by table id. Each table then replaces only
    the schema section of its document; Markdown bodies and any other front
    matter attributes are kept as they are.
    """

    def __init__(
        self,
        output_dir: Path,
        format_name: str,
        beautifier: IBodyBeautifier,
        cache: DocumentCache | None = None,
        validator: SchemaValidator | None = None,
    ) -> None:
        """Initialize the reconciler.

        Args:
            output_dir: Directory holding the documents
            format_name: Output format selector (yaml, json or front-matter)
            beautifier: Markdown body formatter
            cache: Per-run document cache; a fresh one is created when omitted
            validator: Validator applied to every document before it is written
        """
        self.output_dir = output_dir
        self.format_name = format_name
        self.beautifier = beautifier
        self.cache = cache if cache is not None else DocumentCache()
        self.validator = validator or SchemaValidator()

    def create_output_structure(self) -> None:
        """Create the output directory if needed.

        Raises:
            PermissionError: If unable to create directories
        """
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except Exception as e:
            raise PermissionError(
                f"Failed to create output directory {self.output_dir}: {e}"
            ) from e

    def reconcile(self, table: CanonicalTable) -> Path:
        """Merge one table into its document and write it.

        Args:
            table: Canonical description of the table

        Returns:
            Path where the document was written

        Raises:
            UnknownFormatError: If the format selector is not supported
            ValidationError: If the resulting document is invalid
            DocumentParseError: If the target path holds a malformed document
            UnsafeTableIdError: If the table id cannot be used as a file name
        """
        document_format = get_format(self.format_name, self.beautifier)
        documents = self.cache.documents
        if documents is None:
            documents = self.scan(document_format)

        document = documents.get(table.id)
        if document is None:
            path = self.output_dir / document_format.file_name(table.id)
            document = document_format.new_document(path, table.id, table.name)
            documents[table.id] = document
            logger.debug("Creating new document for table %s", table.id)

        previous = document_format.get_schema(document)
        schema = self._merge_schema(previous, table.to_document())

        validation_result = self.validator.validate_table_document(schema)
        if not validation_result.is_valid:
            raise ValidationError(validation_result.errors)
        for warning in validation_result.warnings:
            logger.warning(warning)

        document_format.set_schema(document, schema)
        return self.write(document, document_format)

    def scan(self, document_format: DocumentFormat[Any]) -> dict[str, Document]:
        """Read every existing document of the format into the cache.

        Files that cannot be parsed, carry no table id, or repeat a table id
        already seen are skipped with a warning and remembered as rejected.

        Returns:
            The documents found, keyed by table id
        """
        documents: dict[str, Document] = {}
        rejected: set[Path] = set()

        if self.output_dir.is_dir():
            pattern = f"**/*{document_format.extension}"
            for path in sorted(self.output_dir.glob(pattern)):
                if not path.is_file():
                    continue
                try:
                    document = self.read(path, document_format)
                except DocumentParseError as e:
                    logger.warning("Skipping document: %s", e)
                    rejected.add(path)
                    continue

                table_id = document_format.table_id(document)
                if table_id is None:
                    logger.warning("Skipping document without table id: %s", path)
                    rejected.add(path)
                    continue
                if table_id in documents:
                    logger.warning(
                        "Skipping %s: table %s is already documented in %s",
                        path,
                        table_id,
                        documents[table_id].file_path,
                    )
                    rejected.add(path)
                    continue
                documents[table_id] = document

        logger.info(
            "Found %d existing %s document(s) in %s",
            len(documents),
            document_format.name,
            self.output_dir,
        )
        self.cache.documents = documents
        self.cache.rejected_paths = rejected
        return documents

    def read(self, path: Path, document_format: DocumentFormat[Any]) -> Document:
        """Read and parse one document.

        Raises:
            DocumentParseError: If the file cannot be decoded or parsed
        """
        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise DocumentParseError(path, f"not UTF-8 text: {e}") from e
        return document_format.parse(path, content)

    def write(self, document: Document, document_format: DocumentFormat[Any]) -> Path:
        """Render and write a document.

        Raises:
            DocumentParseError: If the path belongs to a skipped malformed document
            PermissionError: If unable to write the file
        """
        path = document.file_path
        if path in self.cache.rejected_paths:
            raise DocumentParseError(
                path, "refusing to overwrite a document that could not be read"
            )

        content = document_format.render(document)
        self.create_output_structure()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8", newline="\n") as f:
                f.write(content)
        except Exception as e:
            raise PermissionError(f"Failed to write document to {path}: {e}") from e

        logger.info("Document written to: %s", path)
        return path

    def _merge_schema(
        self, previous: dict[str, Any], computed: dict[str, Any]
    ) -> dict[str, Any]:
        """Carry non-empty human-written fields from the previous schema."""
        for field in PRESERVED_FIELDS:
            value = previous.get(field)
            if isinstance(value, str) and value:
                computed[field] = value
        return computed
