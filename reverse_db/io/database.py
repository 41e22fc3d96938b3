"""Database collaborators built on SQLAlchemy.

The schema introspector uses SQLAlchemy reflection and works for any dialect
SQLAlchemy supports. Column comments and index statistics are read from
``INFORMATION_SCHEMA`` and are only available for MySQL; other dialects get
empty results.
"""

from __future__ import annotations

import copy
from collections.abc import Sequence
from typing import Any

from sqlalchemy import bindparam, create_engine, inspect, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import TextClause
from sqlalchemy.types import TypeEngine

from reverse_db.core.config import ReverseConfig
from reverse_db.core.constants import (
    AUTO_INCREMENT,
    CATALOG_DIALECTS,
    DIALECT_DRIVERS,
    PRIMARY_INDEX_NAME,
)
from reverse_db.core.exceptions import (
    DatabaseConnectionError,
    UnrecognizedConstraintShapeError,
)
from reverse_db.core.schemas import (
    ForeignSources,
    RawColumn,
    RawColumnKeyInfo,
    RawCommentRow,
    RawForeignKeyRecord,
    RawIndexRow,
    RawSchema,
)
from reverse_db.io.beautifier import MarkdownBeautifier
from reverse_db.logger import logger
from reverse_db.reconciliation.interfaces import (
    IBodyBeautifier,
    ICommentReader,
    IIndexReader,
    ISchemaIntrospector,
)

COMMENTS_SQL = """
    SELECT C.TABLE_NAME, C.COLUMN_NAME, C.COLUMN_COMMENT
    FROM INFORMATION_SCHEMA.COLUMNS C
    JOIN INFORMATION_SCHEMA.TABLES T
      ON T.TABLE_SCHEMA = C.TABLE_SCHEMA AND T.TABLE_NAME = C.TABLE_NAME
    WHERE C.TABLE_SCHEMA = :database_name
      AND T.TABLE_TYPE = 'BASE TABLE'"""

COLUMN_TYPES_SQL = """
    SELECT TABLE_NAME, COLUMN_NAME, COLUMN_TYPE
    FROM INFORMATION_SCHEMA.COLUMNS
    WHERE TABLE_SCHEMA = :database_name"""

INDEXES_SQL = """
    SELECT TABLE_NAME, INDEX_NAME, COLUMN_NAME, SEQ_IN_INDEX, NON_UNIQUE
    FROM INFORMATION_SCHEMA.STATISTICS
    WHERE TABLE_SCHEMA = :database_name"""


def build_url(config: ReverseConfig) -> URL:
    """Build the SQLAlchemy URL for the configured dialect."""
    drivername = DIALECT_DRIVERS.get(config.dialect, config.dialect)
    if drivername == "sqlite":
        return URL.create(drivername, database=config.database)
    return URL.create(
        drivername,
        username=config.username or None,
        password=config.password or None,
        host=config.host,
        port=config.port,
        database=config.database,
    )


def render_type(column_type: TypeEngine[Any]) -> str:
    """Render a reflected type in lower case, without character set or collation."""
    stripped = copy.copy(column_type)
    for attribute in ("charset", "collation"):
        if getattr(stripped, attribute, None):
            setattr(stripped, attribute, None)
    return str(stripped).lower()


def supports_catalog_queries(engine: Engine) -> bool:
    return engine.dialect.name in CATALOG_DIALECTS


def build_catalog_query(
    sql: str, tables: Sequence[str] | None, column: str, order_by: str = ""
) -> TextClause:
    """Add the optional table filter and ordering to a catalog query."""
    if tables:
        sql = f"{sql}\n      AND {column} IN :tables"
    if order_by:
        sql = f"{sql}\n    ORDER BY {order_by}"
    statement = text(sql)
    if tables:
        statement = statement.bindparams(bindparam("tables", expanding=True))
    return statement


class SqlAlchemyIntrospector:
    """Reads tables, columns and constraint records through SQLAlchemy reflection.

    Constraint records follow the shape the classifier expects: ``source_table``
    and ``source_schema`` both carry the schema name, and the records are
    grouped by table id.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def read_schema(self, tables: Sequence[str] | None = None) -> RawSchema:
        """Introspect the database.

        Args:
            tables: Table names to include; all tables when None

        Returns:
            RawSchema with columns and constraint records per table

        Raises:
            DatabaseConnectionError: If reflection fails
            UnrecognizedConstraintShapeError: If a composite foreign key is found
        """
        try:
            inspector = inspect(self.engine)
            schema_name = inspector.default_schema_name
            table_names = inspector.get_table_names()
            if tables:
                wanted = set(tables)
                table_names = [name for name in table_names if name in wanted]
            column_types = self._read_column_types(schema_name, table_names)

            raw = RawSchema()
            for table_name in table_names:
                pk = inspector.get_pk_constraint(table_name)
                raw.tables[table_name] = self._read_columns(
                    inspector.get_columns(table_name),
                    pk.get("constrained_columns") or [],
                    column_types.get(table_name, {}),
                )
                raw.foreign_keys[table_name] = self._read_constraints(
                    inspector, table_name, schema_name, pk
                )
        except SQLAlchemyError as e:
            raise DatabaseConnectionError("read the database schema", e) from e

        logger.info("Introspected %d table(s)", len(raw.tables))
        return raw

    def _read_column_types(
        self, schema_name: str | None, table_names: list[str]
    ) -> dict[str, dict[str, str]]:
        """Return the declared column types, e.g. ``int(11) unsigned``, per table.

        Only catalog dialects report them; elsewhere the reflected type is used.
        """
        if not table_names or not supports_catalog_queries(self.engine):
            return {}

        statement = build_catalog_query(COLUMN_TYPES_SQL, table_names, "TABLE_NAME")
        params = {"database_name": schema_name, "tables": table_names}
        with self.engine.connect() as conn:
            rows = conn.execute(statement, params).mappings().all()

        column_types: dict[str, dict[str, str]] = {}
        for row in rows:
            column_types.setdefault(row["TABLE_NAME"], {})[row["COLUMN_NAME"]] = (
                str(row["COLUMN_TYPE"]).lower()
            )
        return column_types

    def _read_columns(
        self,
        columns: list[dict[str, Any]],
        primary_columns: list[str],
        column_types: dict[str, str] | None = None,
    ) -> dict[str, RawColumn]:
        column_types = column_types or {}
        result: dict[str, RawColumn] = {}
        for column in columns:
            extra = AUTO_INCREMENT if column.get("autoincrement") is True else None
            declared = column_types.get(column["name"])
            result[column["name"]] = RawColumn(
                type=declared or render_type(column["type"]),
                allow_null=bool(column.get("nullable", True)),
                primary_key=column["name"] in primary_columns,
                default_value=column.get("default"),
                foreign_key=RawColumnKeyInfo(extra=extra),
            )
        return result

    def _read_constraints(
        self,
        inspector: Any,
        table_name: str,
        schema_name: str | None,
        pk: dict[str, Any],
    ) -> dict[str, RawForeignKeyRecord]:
        records: dict[str, RawForeignKeyRecord] = {}

        if pk.get("constrained_columns"):
            records[pk.get("name") or PRIMARY_INDEX_NAME] = RawForeignKeyRecord(
                is_primary_key=True,
                source_schema=schema_name,
                source_table=schema_name,
            )

        for unique in inspector.get_unique_constraints(table_name):
            columns = "_".join(unique["column_names"])
            name = unique.get("name") or f"{table_name}_{columns}_key"
            records[name] = RawForeignKeyRecord(
                is_unique=True, source_schema=schema_name, source_table=schema_name
            )

        for fk in inspector.get_foreign_keys(table_name):
            constrained = fk["constrained_columns"]
            referred = fk["referred_columns"]
            name = fk.get("name") or f"{table_name}_{'_'.join(constrained)}_fkey"
            if len(constrained) != 1 or len(referred) != 1:
                raise UnrecognizedConstraintShapeError(
                    [f"{table_name}.{name}: composite foreign keys are not supported"]
                )
            sources = ForeignSources(
                source_column=constrained[0],
                target_table=fk["referred_table"],
                target_column=referred[0],
            )
            records[name] = RawForeignKeyRecord(
                is_foreign_key=True,
                source_schema=schema_name,
                source_table=schema_name,
                target_schema=fk.get("referred_schema") or schema_name,
                foreign_sources=sources,
                **sources.model_dump(),
            )

        # Plain-index records need merged index statistics to be classified
        if supports_catalog_queries(self.engine):
            for index in inspector.get_indexes(table_name):
                name = index.get("name")
                if name and not index.get("unique") and name not in records:
                    records[name] = RawForeignKeyRecord(
                        source_schema=schema_name, source_table=schema_name
                    )

        return records


class CommentReader:
    """Reads column comments from ``INFORMATION_SCHEMA.COLUMNS`` (MySQL only)."""

    def __init__(self, engine: Engine, database: str) -> None:
        self.engine = engine
        self.database = database

    def read_comments(self, tables: Sequence[str] | None = None) -> list[RawCommentRow]:
        if not supports_catalog_queries(self.engine):
            logger.info(
                "Column comments are not supported for dialect %s",
                self.engine.dialect.name,
            )
            return []

        statement = build_catalog_query(
            COMMENTS_SQL, tables, "C.TABLE_NAME", "C.TABLE_NAME, C.ORDINAL_POSITION"
        )
        params: dict[str, Any] = {"database_name": self.database}
        if tables:
            params["tables"] = list(tables)
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(statement, params).mappings().all()
        except SQLAlchemyError as e:
            raise DatabaseConnectionError("read column comments", e) from e
        return [RawCommentRow.model_validate(dict(row)) for row in rows]


class IndexReader:
    """Reads index statistics from ``INFORMATION_SCHEMA.STATISTICS`` (MySQL only)."""

    def __init__(self, engine: Engine, database: str) -> None:
        self.engine = engine
        self.database = database

    def read_indexes(self, tables: Sequence[str] | None = None) -> list[RawIndexRow]:
        """Return index rows ordered by table and sequence in index."""
        if not supports_catalog_queries(self.engine):
            logger.info(
                "Index statistics are not supported for dialect %s",
                self.engine.dialect.name,
            )
            return []

        statement = build_catalog_query(
            INDEXES_SQL, tables, "TABLE_NAME", "TABLE_NAME, SEQ_IN_INDEX"
        )
        params: dict[str, Any] = {"database_name": self.database}
        if tables:
            params["tables"] = list(tables)
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(statement, params).mappings().all()
        except SQLAlchemyError as e:
            raise DatabaseConnectionError("read index statistics", e) from e
        return [RawIndexRow.model_validate(dict(row)) for row in rows]


class Collaborators:
    """External services one reverse run depends on."""

    def __init__(
        self,
        introspector: ISchemaIntrospector,
        comment_reader: ICommentReader,
        index_reader: IIndexReader,
        beautifier: IBodyBeautifier,
        engine: Engine | None = None,
    ) -> None:
        self.introspector = introspector
        self.comment_reader = comment_reader
        self.index_reader = index_reader
        self.beautifier = beautifier
        self.engine = engine

    @classmethod
    def from_config(cls, config: ReverseConfig) -> Collaborators:
        """Create the SQLAlchemy-backed collaborators for a configuration.

        Raises:
            DatabaseConnectionError: If the dialect or its driver cannot be loaded
        """
        try:
            engine = create_engine(build_url(config))
        except (SQLAlchemyError, ImportError) as e:
            raise DatabaseConnectionError("create the database engine", e) from e
        return cls(
            introspector=SqlAlchemyIntrospector(engine),
            comment_reader=CommentReader(engine, config.database),
            index_reader=IndexReader(engine, config.database),
            beautifier=MarkdownBeautifier(),
            engine=engine,
        )

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
