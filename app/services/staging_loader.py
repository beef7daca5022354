"""
Staging loader.

Decodes an uploaded payload (delimited text or a workbook), drops the title
rows above the data and any blank rows, and replaces the contents of a
staging table with what is left.

Cells are mapped to the staging table's columns by position only: the first
cell of a row goes into the first declared column (identity column excluded),
and so on. Header text is ignored unless VALIDATE_STAGING_HEADERS is on.
"""

import csv
import io
import logging
import zipfile
from datetime import date, datetime
from typing import Any, List, Optional, Sequence

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.config import settings
from app.errors import (
    ConfigurationError,
    EmptyUploadError,
    HeaderMismatchError,
    PersistenceError,
    ValidationError,
)
from app.repositories.dataset_repository import DatasetRepository
from app.utils.sql_identifiers import quote_column, quote_table

logger = logging.getLogger(__name__)

ENCODING_CSV = "csv"
ENCODING_XLSX = "xlsx"
SUPPORTED_ENCODINGS = (ENCODING_CSV, ENCODING_XLSX)

Row = List[Any]


def decode_rows(payload: bytes, encoding: str) -> List[Row]:
    """Turn raw upload bytes into a list of rows of scalar cells."""
    if encoding == ENCODING_CSV:
        try:
            content = payload.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ValidationError(f"CSV payload is not valid UTF-8: {exc}") from exc
        return [list(row) for row in csv.reader(io.StringIO(content))]

    if encoding == ENCODING_XLSX:
        try:
            workbook = load_workbook(io.BytesIO(payload), read_only=True, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError) as exc:
            raise ValidationError(f"Payload is not a readable workbook: {exc}") from exc
        try:
            sheet = workbook.worksheets[0]
            return [list(row) for row in sheet.iter_rows(values_only=True)]
        finally:
            workbook.close()

    raise ValidationError(f"Unsupported payload encoding: {encoding!r}")


def is_blank_row(row: Sequence[Any]) -> bool:
    return all(cell is None or str(cell).strip() == "" for cell in row)


def extract_data_rows(rows: Sequence[Row], header_row_index: int) -> List[Row]:
    """
    Rows after the header boundary, minus blank rows.

    Raises:
        EmptyUploadError: nothing beyond the header, or only blank rows
    """
    data_start = header_row_index + 1
    if len(rows) <= data_start:
        raise EmptyUploadError(
            f"Payload has {len(rows)} rows, no data after header row {header_row_index}"
        )
    data_rows = [list(row) for row in rows[data_start:] if not is_blank_row(row)]
    if not data_rows:
        raise EmptyUploadError("All data rows are empty")
    return data_rows


def cell_to_text(cell: Any) -> Optional[str]:
    """Staging columns are text; blank cells become NULL."""
    if cell is None:
        return None
    if isinstance(cell, bool):
        return "true" if cell else "false"
    if isinstance(cell, datetime):
        return cell.isoformat(sep=" ")
    if isinstance(cell, date):
        return cell.isoformat()
    value = str(cell)
    if value.strip() == "":
        return None
    return value


def fit_row(row: Row, width: int) -> List[Optional[str]]:
    """Pad short rows with NULL and drop cells beyond the declared columns."""
    cells = [cell_to_text(cell) for cell in row[:width]]
    cells.extend([None] * (width - len(cells)))
    return cells


def _normalize_header(value: Any) -> str:
    return "".join(str(value or "").lower().split()).replace("_", "")


def check_headers(header_row: Row, column_names: Sequence[str]) -> None:
    """Fail when the header text does not match the staging columns position by position."""
    for position, column in enumerate(column_names):
        header = header_row[position] if position < len(header_row) else None
        if _normalize_header(header) != _normalize_header(column):
            raise HeaderMismatchError(
                f"Column {position + 1}: header {header!r} does not match {column!r}"
            )


class StagingLoader:
    """Replaces the contents of one staging table per upload."""

    def __init__(self, session_factory: async_sessionmaker, validate_headers: Optional[bool] = None):
        self.session_factory = session_factory
        if validate_headers is None:
            validate_headers = settings.VALIDATE_STAGING_HEADERS
        self.validate_headers = validate_headers

    async def load(self, payload: bytes, encoding: str, table_ref: str, header_row_index: int) -> int:
        """
        Stage an upload.

        Truncation and every insert happen in one transaction. When no data
        rows survive, the staging table is still emptied before
        EmptyUploadError is raised.

        Returns:
            Number of rows inserted
        """
        if header_row_index < 0:
            raise ValidationError(f"header_row_index must be >= 0, got {header_row_index}")
        table = quote_table(table_ref)
        rows = decode_rows(payload, encoding)

        try:
            data_rows = extract_data_rows(rows, header_row_index)
        except EmptyUploadError:
            logger.warning("No data rows found in upload for %s", table_ref)
            await self.truncate(table_ref)
            raise

        try:
            async with self.session_factory() as session:
                async with session.begin():
                    columns = await DatasetRepository(session).staging_columns(table_ref)
                    if not columns:
                        raise ConfigurationError(f"Staging table {table_ref} has no columns")
                    column_names = [column["column_name"] for column in columns]

                    if self.validate_headers:
                        check_headers(list(rows[header_row_index]), column_names)

                    await session.execute(text(f"TRUNCATE TABLE {table}"))

                    placeholders = ", ".join(f":p{index}" for index in range(len(column_names)))
                    insert_sql = (
                        f"INSERT INTO {table} ({', '.join(quote_column(name) for name in column_names)}) "
                        f"VALUES ({placeholders})"
                    )
                    params = [
                        {f"p{index}": value for index, value in enumerate(fit_row(row, len(column_names)))}
                        for row in data_rows
                    ]
                    await session.execute(text(insert_sql), params)
        except SQLAlchemyError as exc:
            logger.error("Staging load into %s rolled back: %s", table_ref, exc)
            raise PersistenceError(f"Staging load into {table_ref} failed: {exc}") from exc

        logger.info("Inserted %d rows into %s", len(data_rows), table_ref)
        return len(data_rows)

    async def truncate(self, table_ref: str) -> None:
        table = quote_table(table_ref)
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await session.execute(text(f"TRUNCATE TABLE {table}"))
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not truncate {table_ref}: {exc}") from exc
