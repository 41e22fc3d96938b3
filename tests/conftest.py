"""Shared test fixtures."""

import shutil
import tempfile
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest

from reverse_db.core.config import ReverseConfig
from reverse_db.core.schemas import (
    ForeignSources,
    RawColumn,
    RawCommentRow,
    RawForeignKeyRecord,
    RawIndexRow,
    RawSchema,
)
from reverse_db.io.database import Collaborators
from reverse_db.reconciliation.interfaces import (
    IBodyBeautifier,
    ICommentReader,
    IIndexReader,
    ISchemaIntrospector,
)


class PassthroughBeautifier:
    """Beautifier that returns bodies unchanged."""

    def beautify(self, text: str) -> str:
        return text


@pytest.fixture
def temp_output_dir():
    """Create a temporary output directory."""
    temp_dir = Path(tempfile.mkdtemp())
    yield temp_dir
    shutil.rmtree(temp_dir)


def make_config(output_dir: Path, **overrides: Any) -> ReverseConfig:
    """Build a config for tests without touching the environment."""
    values: dict[str, Any] = {
        "database": "app",
        "username": "root",
        "password": "secret",
        "output": output_dir,
    }
    values.update(overrides)
    return ReverseConfig(**values)


def foreign_key_record(
    column: str, target_table: str, target_column: str, schema: str = "app"
) -> RawForeignKeyRecord:
    """Build a well-formed foreign key record with a matching cross-reference.

    As the introspector reports it, ``source_table`` carries the schema name.
    """
    sources = ForeignSources(
        source_column=column, target_table=target_table, target_column=target_column
    )
    return RawForeignKeyRecord(
        is_foreign_key=True,
        source_schema=schema,
        source_table=schema,
        target_schema=schema,
        foreign_sources=sources,
        **sources.model_dump(),
    )


def users_schema() -> RawSchema:
    """The users table: id (int, primary, auto_increment) and name (varchar(100))."""
    return RawSchema(
        tables={
            "users": {
                "id": RawColumn.model_validate(
                    {
                        "type": "int(11)",
                        "allowNull": False,
                        "primaryKey": True,
                        "foreignKey": {"extra": "auto_increment"},
                    }
                ),
                "name": RawColumn.model_validate(
                    {"type": "varchar(100)", "allowNull": False}
                ),
            }
        },
        foreign_keys={
            "users": {
                "PRIMARY": RawForeignKeyRecord(
                    is_primary_key=True, source_schema="app", source_table="app"
                ),
                "uq_users_name": RawForeignKeyRecord(
                    is_unique=True, source_schema="app", source_table="app"
                ),
            }
        },
    )


def users_comments() -> list[RawCommentRow]:
    return [
        RawCommentRow(TABLE_NAME="users", COLUMN_NAME="id", COLUMN_COMMENT=""),
        RawCommentRow(TABLE_NAME="users", COLUMN_NAME="name", COLUMN_COMMENT="氏名"),
    ]


def users_indexes() -> list[RawIndexRow]:
    return [
        RawIndexRow(
            TABLE_NAME="users",
            INDEX_NAME="PRIMARY",
            COLUMN_NAME="id",
            SEQ_IN_INDEX=1,
            NON_UNIQUE=0,
        ),
        RawIndexRow(
            TABLE_NAME="users",
            INDEX_NAME="uq_users_name",
            COLUMN_NAME="name",
            SEQ_IN_INDEX=1,
            NON_UNIQUE=0,
        ),
    ]


def mock_collaborators(
    schema: RawSchema,
    comments: list[RawCommentRow] | None = None,
    indexes: list[RawIndexRow] | None = None,
    beautifier: IBodyBeautifier | None = None,
) -> Collaborators:
    """Collaborators whose readers return the given data.

    Each call hands out a fresh copy of the schema so repeated runs do not
    share mutated raw records.
    """
    introspector = Mock(spec=ISchemaIntrospector)
    introspector.read_schema.side_effect = lambda tables=None: schema.model_copy(
        deep=True
    )
    comment_reader = Mock(spec=ICommentReader)
    comment_reader.read_comments.return_value = comments or []
    index_reader = Mock(spec=IIndexReader)
    index_reader.read_indexes.return_value = indexes or []
    return Collaborators(
        introspector=introspector,
        comment_reader=comment_reader,
        index_reader=index_reader,
        beautifier=beautifier or PassthroughBeautifier(),
    )


@pytest.fixture
def users_collaborators() -> Collaborators:
    """Collaborators describing the users table."""
    return mock_collaborators(users_schema(), users_comments(), users_indexes())
