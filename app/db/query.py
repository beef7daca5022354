"""
Raw query helpers.

Most reads in this service go straight to database views and functions, so
they are issued as parameterized text statements and returned as plain dicts
together with a light description of each column.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import PersistenceError

logger = logging.getLogger(__name__)

Rows = List[Dict[str, Any]]
Columns = List[Dict[str, str]]


def normalize_type(value: Any) -> str:
    """Map a Python value to the scalar type name reported to clients."""
    if value is None:
        return "unknown"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float, Decimal)):
        return "number"
    if isinstance(value, datetime):
        return "datetime"
    if isinstance(value, date):
        return "date"
    if isinstance(value, (dict, list)):
        return "json"
    return "string"


def describe_columns(keys: Sequence[str], rows: Rows) -> Columns:
    """Describe each column by the first non-null value found in it."""
    columns = []
    for key in keys:
        sample = next((row[key] for row in rows if row.get(key) is not None), None)
        columns.append({"name": key, "type": normalize_type(sample)})
    return columns


async def fetch_rows(
    db: AsyncSession,
    sql: str,
    params: Optional[Dict[str, Any]] = None,
    loggable: bool = True,
) -> Tuple[Rows, Columns]:
    """Execute a statement and return (rows, columns)."""
    if loggable:
        logger.debug("%s %s", " ".join(sql.split()), params or {})
    try:
        result = await db.execute(text(sql), params or {})
    except SQLAlchemyError as exc:
        logger.error("Error executing query: %s", exc)
        raise PersistenceError(str(exc)) from exc

    keys = list(result.keys())
    rows = [dict(row) for row in result.mappings().all()]
    return rows, describe_columns(keys, rows)
