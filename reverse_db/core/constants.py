"""Constants shared by the reverse-db document generator."""

from pathlib import Path

# Defaults
DEFAULT_OUTPUT_DIR = Path(".a5doc")
DEFAULT_DIALECT = "mysql"
DEFAULT_FORMAT = "front-matter"

# Output format selectors
FORMAT_YAML = "yaml"
FORMAT_JSON = "json"
FORMAT_FRONT_MATTER = "front-matter"

# Dialects whose INFORMATION_SCHEMA exposes column comments and index statistics
CATALOG_DIALECTS = ("mysql",)

# SQLAlchemy driver names per dialect selector
DIALECT_DRIVERS = {
    "mysql": "mysql+pymysql",
    "mariadb": "mariadb+pymysql",
    "postgres": "postgresql+psycopg2",
    "postgresql": "postgresql+psycopg2",
    "sqlite": "sqlite",
    "mssql": "mssql+pyodbc",
}

# Canonical model values
RELATION_TYPE = "0N:1"
PRIMARY_INDEX_NAME = "PRIMARY"
AUTO_INCREMENT = "auto_increment"
INDEX_UNIQUE = "unique"
INDEX_NON_UNIQUE = "non-unique"
