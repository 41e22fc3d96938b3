"""Tests for the command line entry point and exit codes."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from conftest import make_config, mock_collaborators, users_schema

from reverse_db.cli.generator import DocumentGenerator, main, parse_config
from reverse_db.core.exceptions import DatabaseConnectionError
from reverse_db.core.schemas import RawCommentRow, RawForeignKeyRecord


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep tests from reconfiguring the logging system."""
    with patch("reverse_db.cli.generator.setup_logger"):
        yield


class TestParseConfig:
    """Test mapping command line options onto settings."""

    def test_all_options(self):
        argv = [
            "-d", "shop",
            "-u", "reader",
            "-p", "pw",
            "-h", "db.internal",
            "-P", "3307",
            "-D", "mariadb",
            "-t", "users,posts",
            "-o", "docs/tables",
            "-f", "json",
        ]  # fmt: skip
        with patch.dict(os.environ, {}, clear=True):
            config = parse_config(argv)

        assert config.database == "shop"
        assert config.username == "reader"
        assert config.password == "pw"
        assert config.host == "db.internal"
        assert config.port == 3307
        assert config.dialect == "mariadb"
        assert config.tables == ["users", "posts"]
        assert config.output == Path("docs/tables")
        assert config.format == "json"

    def test_options_fall_back_to_environment(self):
        env = {"REVERSE_DB_DATABASE": "shop", "REVERSE_DB_HOST": "db"}
        with patch.dict(os.environ, env, clear=True):
            config = parse_config(["-u", "reader"])

        assert config.database == "shop"
        assert config.host == "db"
        assert config.username == "reader"

    def test_dash_selects_all_tables(self):
        with patch.dict(os.environ, {}, clear=True):
            config = parse_config(["-d", "shop", "-t", "-"])

        assert config.tables is None

    def test_unsupported_format_is_rejected(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_config(["-d", "shop", "-f", "xml"])

        assert exc_info.value.code == 2


class TestMain:
    """Test the reverse-db command."""

    def test_missing_database_exits_with_configuration_code(self):
        with patch.dict(os.environ, {}, clear=True):
            with patch("reverse_db.cli.generator.load_dotenv"):
                with pytest.raises(SystemExit) as exc_info:
                    main([])

        assert exc_info.value.code == 1

    def test_runs_generator(self):
        with patch.dict(os.environ, {}, clear=True):
            with patch("reverse_db.cli.generator.load_dotenv"):
                with patch("reverse_db.cli.generator.DocumentGenerator") as generator:
                    main(["-d", "shop"])

        (config,), _ = generator.call_args
        assert config.database == "shop"
        generator.return_value.run.assert_called_once_with()


class TestDocumentGeneratorExitCodes:
    """Test that each failure kind maps to its exit code."""

    def run_expecting_exit(self, config, collaborators):
        with pytest.raises(SystemExit) as exc_info:
            DocumentGenerator(config, collaborators).run()
        return exc_info.value.code

    def test_success_does_not_exit(self, temp_output_dir, users_collaborators):
        DocumentGenerator(make_config(temp_output_dir), users_collaborators).run()

        assert (temp_output_dir / "users.md").exists()

    def test_connection_error(self, temp_output_dir, users_collaborators):
        users_collaborators.introspector.read_schema.side_effect = (
            DatabaseConnectionError("read the database schema", OSError("refused"))
        )

        code = self.run_expecting_exit(
            make_config(temp_output_dir), users_collaborators
        )

        assert code == 2

    def test_unrecognized_constraint(self, temp_output_dir):
        schema = users_schema()
        schema.foreign_keys["users"]["ix_mystery"] = RawForeignKeyRecord()

        code = self.run_expecting_exit(
            make_config(temp_output_dir), mock_collaborators(schema)
        )

        assert code == 3

    def test_unknown_format(self, temp_output_dir, users_collaborators):
        config = make_config(temp_output_dir, format="xml")

        assert self.run_expecting_exit(config, users_collaborators) == 4

    def test_output_path_is_a_file(self, temp_output_dir, users_collaborators):
        output = temp_output_dir / "occupied"
        output.write_text("", encoding="utf-8")

        code = self.run_expecting_exit(make_config(output), users_collaborators)

        assert code == 5

    def test_malformed_target_document(self, temp_output_dir, users_collaborators):
        (temp_output_dir / "users.md").write_text("no front matter\n", encoding="utf-8")

        code = self.run_expecting_exit(
            make_config(temp_output_dir), users_collaborators
        )

        assert code == 6

    def test_unknown_comment_column(self, temp_output_dir):
        comments = [
            RawCommentRow(TABLE_NAME="users", COLUMN_NAME="email", COLUMN_COMMENT="x")
        ]

        code = self.run_expecting_exit(
            make_config(temp_output_dir), mock_collaborators(users_schema(), comments)
        )

        assert code == 7

    def test_unknown_dialect(self, temp_output_dir):
        config = make_config(temp_output_dir, dialect="nosuchdb")

        assert self.run_expecting_exit(config, None) == 2

    def test_unsafe_table_id(self, temp_output_dir):
        schema = users_schema()
        schema.tables["../escape"] = schema.tables.pop("users")
        schema.foreign_keys.clear()

        code = self.run_expecting_exit(
            make_config(temp_output_dir), mock_collaborators(schema)
        )

        assert code == 6
        assert not (temp_output_dir.parent / "escape.md").exists()
