"""Configuration for the reverse-db document generator."""

from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .constants import DEFAULT_DIALECT, DEFAULT_FORMAT, DEFAULT_OUTPUT_DIR
from .exceptions import ConfigurationError

ENV_PREFIX = "REVERSE_DB_"


class ExitCodesConfig(BaseModel):
    """Configuration for exit codes."""

    success: int = 0
    error_configuration: int = 1
    error_connection: int = 2
    error_unrecognized_constraint: int = 3
    error_unknown_format: int = 4
    error_file_system: int = 5
    error_invalid_document: int = 6
    error_schema_consistency: int = 7


class ReverseConfig(BaseSettings):
    """Settings for one reverse run.

    Values come from keyword arguments (the command line), then from
    ``REVERSE_DB_*`` environment variables, then from a ``.env`` file.
    """

    # Connection
    database: str = Field(..., description="Database (schema) name to introspect")
    username: str = Field(default="", description="Database user")
    password: str = Field(default="", description="Database password")
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=3306, description="Database port")
    dialect: str = Field(default=DEFAULT_DIALECT, description="Database dialect")

    # Selection and output
    tables: Annotated[list[str] | None, NoDecode] = Field(
        default=None, description="Tables to document; all tables when unset"
    )
    output: Path = Field(
        default=DEFAULT_OUTPUT_DIR, description="Directory for generated documents"
    )
    format: str = Field(
        default=DEFAULT_FORMAT,
        description="Output format: yaml, json or front-matter",
    )

    exit_codes: ExitCodesConfig = Field(default_factory=ExitCodesConfig)

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def __init__(self, **data: Any) -> None:
        """Initialize config with custom error handling for missing required fields."""
        try:
            super().__init__(**data)
        except ValidationError as e:
            # Only handle missing field errors, let other validation errors bubble up
            for error in e.errors():
                if error["type"] == "missing":
                    field_name = error["loc"][0] if error["loc"] else "unknown"
                    env_var_name = f"{ENV_PREFIX}{field_name}".upper()
                    raise ConfigurationError(variable_name=env_var_name) from e
            raise

    @field_validator("tables", mode="before")
    @classmethod
    def split_tables(cls, v: Any) -> Any:
        """Accept a comma separated string; ``-`` or empty means all tables."""
        if isinstance(v, str):
            v = [name.strip() for name in v.split(",") if name.strip()]
        if isinstance(v, list) and (not v or v == ["-"]):
            return None
        return v
