"""Resource naming utilities.

Database and collection names become DynamoDB table names:
- The database name is the catalog table name
- Each collection lives in the table ``<database>.<collection>``

Both segments must therefore satisfy the DynamoDB table name rules:
- Alphanumeric characters, hyphens and underscores only (the period is
  reserved as the segment separator)
- The catalog table name needs at least 3 characters
- The full table name may not exceed 255 characters
"""

import re

from .exceptions import ConfigurationError

SEPARATOR = "."

MIN_TABLE_NAME_LENGTH = 3
MAX_TABLE_NAME_LENGTH = 255

NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def validate_name(field: str, name: str) -> None:
    """
    Validate a database or collection name segment.

    Args:
        field: Setting being validated (used in the error)
        name: The user-provided name

    Raises:
        ConfigurationError: If the name is empty or contains invalid characters
    """
    if not name:
        raise ConfigurationError(field, name, "Name cannot be empty")

    if SEPARATOR in name:
        raise ConfigurationError(
            field,
            name,
            "Contains period. Periods separate the database and collection names.",
        )
    if " " in name:
        raise ConfigurationError(
            field,
            name,
            "Contains spaces. Use hyphens instead (e.g., 'my-docs' not 'my docs')",
        )

    if not NAME_PATTERN.match(name):
        raise ConfigurationError(
            field,
            name,
            "Must contain only alphanumeric characters, hyphens and underscores.",
        )


def validate_database_name(name: str) -> None:
    """Validate the logical database name (also the catalog table name)."""
    validate_name("database_name", name)
    if len(name) < MIN_TABLE_NAME_LENGTH:
        raise ConfigurationError(
            "database_name",
            name,
            f"Too short. Needs at least {MIN_TABLE_NAME_LENGTH} characters.",
        )


def table_name(database: str, collection: str) -> str:
    """
    Build the table name for a collection.

    Raises:
        ConfigurationError: If either segment is invalid or the result is too long
    """
    validate_database_name(database)
    validate_name("collection name", collection)
    name = f"{database}{SEPARATOR}{collection}"
    if len(name) > MAX_TABLE_NAME_LENGTH:
        raise ConfigurationError(
            "collection name",
            collection,
            f"Too long. Table name exceeds {MAX_TABLE_NAME_LENGTH} characters.",
        )
    return name
