"""Command line entry point that runs the reverse pipeline."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from reverse_db.core.config import ExitCodesConfig, ReverseConfig
from reverse_db.core.constants import FORMAT_FRONT_MATTER, FORMAT_JSON, FORMAT_YAML
from reverse_db.core.exceptions import (
    ConfigurationError,
    DatabaseConnectionError,
    DocumentParseError,
    ReverseDbError,
    SchemaConsistencyError,
    UnknownFormatError,
    UnrecognizedConstraintShapeError,
    ValidationError,
)
from reverse_db.io.database import Collaborators
from reverse_db.logger import logger, setup_logger
from reverse_db.pipeline import reverse


class DocumentGenerator:
    """Runs one reverse pass and turns failures into exit codes.

    This class wraps reverse() for command line use: it sets up logging,
    reports progress, and exits with a code that names the kind of failure.
    """

    def __init__(
        self, config: ReverseConfig, collaborators: Collaborators | None = None
    ) -> None:
        """Initialize the document generator.

        Args:
            config: Settings for the run
            collaborators: Database and formatting services; created from
                config when None
        """
        self.config = config
        self.collaborators = collaborators

    def run(self) -> None:
        """Run the complete reverse process.

        Raises:
            SystemExit: If any critical error occurs during generation
        """
        exit_codes = self.config.exit_codes
        try:
            setup_logger()
            logger.info(
                "Documenting database %s into %s (%s)...",
                self.config.database,
                self.config.output,
                self.config.format,
            )
            written = self.run_for_testing()
            logger.info("Done. Wrote %d document(s).", len(written))
        except DatabaseConnectionError as e:
            logger.error("Database error: %s", e, exc_info=True)
            sys.exit(exit_codes.error_connection)
        except SchemaConsistencyError as e:
            logger.error("Schema consistency error: %s", e)
            sys.exit(exit_codes.error_schema_consistency)
        except UnrecognizedConstraintShapeError as e:
            logger.error("Constraint classification error: %s", e)
            sys.exit(exit_codes.error_unrecognized_constraint)
        except UnknownFormatError as e:
            logger.error("%s", e)
            sys.exit(exit_codes.error_unknown_format)
        except (ValidationError, DocumentParseError) as e:
            logger.error("Document error: %s", e)
            sys.exit(exit_codes.error_invalid_document)
        except ConfigurationError as e:
            logger.error("%s", e)
            sys.exit(exit_codes.error_configuration)
        except ReverseDbError as e:
            logger.error("Reverse error: %s", e, exc_info=True)
            sys.exit(exit_codes.error_invalid_document)
        except PermissionError as e:
            logger.error("File system error: %s", e, exc_info=True)
            sys.exit(exit_codes.error_file_system)
        except Exception:
            logger.exception("Unexpected error occurred")
            sys.exit(exit_codes.error_file_system)

    def run_for_testing(self) -> list[Path]:
        """Run the complete reverse process for testing.

        Unlike run(), this method raises exceptions instead of calling sys.exit(),
        making it suitable for unit tests.

        Returns:
            List of paths where documents were written

        Raises:
            ReverseDbError: If any critical error occurs during generation
        """
        return reverse(self.config, self.collaborators)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser; options mirror the REVERSE_DB_* settings."""
    parser = argparse.ArgumentParser(
        prog="reverse-db",
        description="Generate one documentation file per database table.",
        add_help=False,
    )
    parser.add_argument("--help", action="help", help="show this help and exit")
    parser.add_argument("-d", "--database", help="database (schema) name")
    parser.add_argument("-u", "--username", help="database user")
    parser.add_argument("-p", "--password", help="database password")
    parser.add_argument("-h", "--host", help="database host (default: localhost)")
    parser.add_argument("-P", "--port", type=int, help="database port (default: 3306)")
    parser.add_argument("-D", "--dialect", help="database dialect (default: mysql)")
    parser.add_argument(
        "-t",
        "--table",
        dest="tables",
        help="comma separated table names, '-' for all tables",
    )
    parser.add_argument(
        "-o", "--output", type=Path, help="output directory (default: .a5doc)"
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=[FORMAT_YAML, FORMAT_FRONT_MATTER, FORMAT_JSON],
        help="document format (default: front-matter)",
    )
    return parser


def parse_config(argv: Sequence[str] | None = None) -> ReverseConfig:
    """Build the run configuration from command line options and the environment.

    Raises:
        ConfigurationError: If a required setting is missing everywhere
    """
    args = build_parser().parse_args(argv)
    overrides: dict[str, Any] = {
        key: value for key, value in vars(args).items() if value is not None
    }
    return ReverseConfig(**overrides)


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for the reverse-db command."""
    # Populate os.environ from .env (if present) before reading settings
    load_dotenv()
    try:
        config = parse_config(argv)
    except ConfigurationError as e:
        setup_logger()
        logger.error("%s", e)
        sys.exit(ExitCodesConfig().error_configuration)

    DocumentGenerator(config).run()
