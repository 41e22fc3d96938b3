"""End-to-end tests of the reverse pipeline with in-memory collaborators."""

import json

import pytest
import yaml
from conftest import (
    foreign_key_record,
    make_config,
    mock_collaborators,
    users_comments,
    users_indexes,
    users_schema,
)

from reverse_db.core.exceptions import (
    DatabaseConnectionError,
    SchemaConsistencyError,
    UnrecognizedConstraintShapeError,
)
from reverse_db.core.schemas import RawColumn, RawCommentRow, RawForeignKeyRecord
from reverse_db.io.beautifier import MarkdownBeautifier
from reverse_db.pipeline import ReverseContext, build_tables, reverse

EXPECTED_USERS = {
    "id": "users",
    "name": "users",
    "category": "",
    "description": "",
    "columns": {
        "id": {"name": "id", "type": "int", "length": 11, "autoIncrement": True},
        "name": {"name": "氏名", "type": "varchar", "length": 100},
    },
    "primary": ["id"],
    "indexes": {"uq_users_name": {"type": "unique", "columns": ["name"]}},
    "foreignKeys": {},
}


def users_and_posts_schema():
    schema = users_schema()
    schema.tables["posts"] = {
        "id": RawColumn(type="int(11)", allow_null=False, primary_key=True),
        "user_id": RawColumn(type="int(11)", allow_null=False),
        "body": RawColumn(type="text"),
    }
    schema.foreign_keys["posts"] = {
        "PRIMARY": RawForeignKeyRecord(is_primary_key=True),
        "fk_posts_user": foreign_key_record("user_id", "users", "id"),
    }
    return schema


class TestUsersScenario:
    """Test documenting the users table."""

    def test_yaml_document(self, temp_output_dir, users_collaborators):
        config = make_config(temp_output_dir, format="yaml")

        written = reverse(config, users_collaborators)

        assert written == [temp_output_dir / "users.yml"]
        data = yaml.safe_load(written[0].read_text(encoding="utf-8"))
        assert data == EXPECTED_USERS

    def test_json_document(self, temp_output_dir, users_collaborators):
        config = make_config(temp_output_dir, format="json")

        written = reverse(config, users_collaborators)

        assert json.loads(written[0].read_text(encoding="utf-8")) == EXPECTED_USERS

    def test_front_matter_document(self, temp_output_dir, users_collaborators):
        config = make_config(temp_output_dir)

        written = reverse(config, users_collaborators)

        content = written[0].read_text(encoding="utf-8")
        assert content.startswith("---\ndocId: users\ntitle: users\nschema:\n")
        assert content.endswith("---\n\n")
        front_matter = yaml.safe_load(content.split("---\n")[1])
        assert front_matter["schema"] == EXPECTED_USERS

    def test_table_filter_is_passed_to_every_reader(
        self, temp_output_dir, users_collaborators
    ):
        config = make_config(temp_output_dir, tables="users")

        reverse(config, users_collaborators)

        users_collaborators.introspector.read_schema.assert_called_once_with(["users"])
        users_collaborators.comment_reader.read_comments.assert_called_once_with(
            ["users"]
        )
        users_collaborators.index_reader.read_indexes.assert_called_once_with(["users"])

    def test_foreign_keys_are_registered(self, temp_output_dir):
        collaborators = mock_collaborators(
            users_and_posts_schema(), users_comments(), users_indexes()
        )
        config = make_config(temp_output_dir, format="yaml")

        written = reverse(config, collaborators)

        assert [path.name for path in written] == ["users.yml", "posts.yml"]
        posts = yaml.safe_load((temp_output_dir / "posts.yml").read_text("utf-8"))
        assert posts["foreignKeys"] == {
            "fk_posts_user": {
                "columns": ["user_id"],
                "references": {"tableId": "users", "columns": ["id"]},
                "relationType": "0N:1",
            }
        }
        assert posts["columns"]["body"] == {
            "name": "body",
            "type": "text",
            "notNull": False,
        }


class TestIdempotence:
    """Test that re-running without schema changes rewrites identical bytes."""

    @pytest.mark.parametrize("format_name", ["yaml", "json", "front-matter"])
    def test_second_run_is_byte_identical(self, temp_output_dir, format_name):
        config = make_config(temp_output_dir, format=format_name)
        collaborators = mock_collaborators(
            users_and_posts_schema(),
            users_comments(),
            users_indexes(),
            beautifier=MarkdownBeautifier(),
        )

        first = {path: path.read_bytes() for path in reverse(config, collaborators)}
        second = {path: path.read_bytes() for path in reverse(config, collaborators)}

        assert first == second

    def test_human_edits_survive_a_second_run(
        self, temp_output_dir, users_collaborators
    ):
        config = make_config(temp_output_dir)
        (path,) = reverse(config, users_collaborators)
        path.write_text(
            path.read_text(encoding="utf-8")
            .replace("title: users", "title: Users")
            .replace("description: ''", "description: Registered people")
            + "# Notes\n\nKept across runs.\n",
            encoding="utf-8",
        )

        reverse(config, users_collaborators)

        content = path.read_text(encoding="utf-8")
        assert "title: Users\n" in content
        assert "description: Registered people\n" in content
        assert content.endswith("# Notes\n\nKept across runs.\n")

    def test_each_run_rescans_the_output_directory(
        self, temp_output_dir, users_collaborators
    ):
        config = make_config(temp_output_dir, format="yaml")
        reverse(config, users_collaborators)
        (temp_output_dir / "users.yml").rename(temp_output_dir / "people.yml")

        written = reverse(config, users_collaborators)

        assert written == [temp_output_dir / "people.yml"]
        assert not (temp_output_dir / "users.yml").exists()


class TestFailures:
    """Test that failures surface as typed errors."""

    def test_connection_error_propagates(self, temp_output_dir, users_collaborators):
        users_collaborators.introspector.read_schema.side_effect = (
            DatabaseConnectionError("read the database schema", OSError("refused"))
        )

        with pytest.raises(DatabaseConnectionError, match="refused"):
            reverse(make_config(temp_output_dir), users_collaborators)

        assert list(temp_output_dir.iterdir()) == []

    def test_unknown_comment_column(self, temp_output_dir):
        comments = [
            RawCommentRow(TABLE_NAME="users", COLUMN_NAME="email", COLUMN_COMMENT="x")
        ]
        collaborators = mock_collaborators(users_schema(), comments)

        with pytest.raises(SchemaConsistencyError, match="users.email"):
            reverse(make_config(temp_output_dir), collaborators)

    def test_classification_failure_writes_nothing(self, temp_output_dir):
        schema = users_and_posts_schema()
        schema.foreign_keys["posts"]["ix_mystery"] = RawForeignKeyRecord()
        collaborators = mock_collaborators(schema, users_comments(), users_indexes())

        with pytest.raises(UnrecognizedConstraintShapeError, match="ix_mystery"):
            reverse(make_config(temp_output_dir), collaborators)

        assert list(temp_output_dir.iterdir()) == []

    def test_build_tables_does_not_touch_the_output(
        self, temp_output_dir, users_collaborators
    ):
        context = ReverseContext(make_config(temp_output_dir), users_collaborators)

        tables = build_tables(context)

        assert list(tables) == ["users"]
        assert not context.cache.is_scanned
        assert list(temp_output_dir.iterdir()) == []
