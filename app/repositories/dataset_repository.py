"""
Dataset descriptor repository - reads cm_conf.t_data_etl_conf and the
catalog metadata of the staging tables it points at.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import PersistenceError
from app.models.etl_conf import DataEtlConf
from app.utils.sql_identifiers import quote_column, quote_table, split_table_ref


STAGING_COLUMNS_SQL = """
SELECT a.attname AS column_name,
       a.attnum AS position,
       format_type(a.atttypid, a.atttypmod) AS data_type,
       col_description(a.attrelid, a.attnum) AS title,
       (a.attidentity <> '' OR a.attname = 'id') AS is_identity
FROM pg_attribute a
JOIN pg_class c ON a.attrelid = c.oid
JOIN pg_namespace n ON c.relnamespace = n.oid
WHERE n.nspname = :schema
  AND c.relname = :table
  AND a.attnum > 0
  AND NOT a.attisdropped
ORDER BY a.attnum
"""


class DatasetRepository:
    """Repository for dataset descriptors."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, dataset_id: int) -> Optional[DataEtlConf]:
        try:
            result = await self.db.execute(
                select(DataEtlConf).where(DataEtlConf.id == dataset_id)
            )
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc
        return result.scalar_one_or_none()

    async def list_all(self) -> list[DataEtlConf]:
        result = await self.db.execute(
            select(DataEtlConf).order_by(DataEtlConf.imsi_donor_id, DataEtlConf.id)
        )
        return list(result.scalars().all())

    async def list_routine_names(self) -> Dict[int, Optional[str]]:
        """Map dataset id -> configured transfer routine name."""
        result = await self.db.execute(
            select(DataEtlConf.id, DataEtlConf.transfer_function_name)
        )
        return {row.id: row.transfer_function_name for row in result.all()}

    async def staging_columns(self, table_ref: str, include_identity: bool = False) -> List[Dict[str, Any]]:
        """
        Declared columns of a table in ordinal order.

        Each entry has column_name, position, data_type and title (the column
        comment shown as a header in the UI).
        """
        schema, table = split_table_ref(table_ref)
        try:
            result = await self.db.execute(
                text(STAGING_COLUMNS_SQL), {"schema": schema, "table": table}
            )
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc
        columns = []
        for row in result.mappings().all():
            if row["is_identity"] and not include_identity:
                continue
            columns.append(
                {
                    "column_name": row["column_name"],
                    "position": row["position"],
                    "data_type": row["data_type"],
                    "title": row["title"],
                }
            )
        return columns

    async def set_column_title(self, table_ref: str, column: str, title: str) -> None:
        """Store a display title as the column comment."""
        # COMMENT ON does not accept bind parameters
        literal = "'" + title.replace("'", "''") + "'"
        statement = f"COMMENT ON COLUMN {quote_table(table_ref)}.{quote_column(column)} IS {literal}"
        try:
            await self.db.execute(text(statement))
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc
