"""
Identifier validation for SQL assembled around configured table names.

Table and column names cannot be bound as parameters, so every name that ends
up inside a statement goes through these helpers first.
"""

import re

from app.errors import ConfigurationError

_TABLE_PART = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_COLUMN = re.compile(r"^[A-Za-z0-9_]+$")


def split_table_ref(table_ref: str) -> tuple[str, str]:
    """Split ``schema.table`` into its parts. Unqualified names land in ``public``."""
    if not table_ref or not isinstance(table_ref, str):
        raise ConfigurationError(f"Invalid table reference: {table_ref!r}")
    parts = table_ref.strip().split(".")
    if len(parts) == 1:
        parts = ["public", parts[0]]
    if len(parts) != 2 or not all(_TABLE_PART.match(part) for part in parts):
        raise ConfigurationError(f"Invalid table reference: {table_ref!r}")
    return parts[0], parts[1]


def quote_table(table_ref: str) -> str:
    schema, table = split_table_ref(table_ref)
    return f'"{schema}"."{table}"'


def quote_column(column: str) -> str:
    if not column or not _COLUMN.match(column):
        raise ConfigurationError(f"Invalid column name: {column!r}")
    return f'"{column}"'
