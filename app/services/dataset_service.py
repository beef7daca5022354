"""
Dataset service - loader configuration and browsing/editing of versioned rows.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.query import Columns, Rows, fetch_rows
from app.errors import ConfigurationError, UnknownDatasetError
from app.models.etl_conf import DataEtlConf
from app.repositories.dataset_repository import DatasetRepository
from app.repositories.version_repository import VersionRepository
from app.services.dataset_layouts import TRANSFER_ROUTINES, DatasetLayout
from app.utils.sql_identifiers import quote_column, quote_table

logger = logging.getLogger(__name__)


class DatasetService:
    """Read/edit helpers over dataset descriptors and their tables."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.datasets = DatasetRepository(db)
        self.versions = VersionRepository(db)

    async def list_loaders(self) -> List[Dict[str, Any]]:
        """Every dataset with its donor, versions and staging columns."""
        loaders = []
        for descriptor in await self.datasets.list_all():
            versions = await self.versions.list_versions(descriptor.id)
            columns = await self.datasets.staging_columns(descriptor.temp_table_name)
            loaders.append(
                {
                    "id": descriptor.id,
                    "imsi_donor_name": descriptor.imsi_donor.imsi_donor_name if descriptor.imsi_donor else None,
                    "data_set_name": descriptor.data_set_name,
                    "temp_table_name": descriptor.temp_table_name,
                    "permanent_table_name": descriptor.permanent_table_name,
                    "versions": [{"id": v.id, "name": v.display_name} for v in versions] or None,
                    "columns": columns,
                }
            )
        return loaders

    async def get_version_rows(self, dataset_id: int, version_id: int) -> tuple[Rows, Columns]:
        """Rows of the dataset's permanent table stamped with one version."""
        descriptor = await self._descriptor(dataset_id)
        sql = (
            f"SELECT * FROM {quote_table(descriptor.permanent_table_name)} "
            "WHERE version_id = :version_id ORDER BY id"
        )
        return await fetch_rows(self.db, sql, {"version_id": version_id})

    async def update_row(self, dataset_id: int, row_id: int, values: Dict[str, Any]) -> tuple[Rows, Columns]:
        """Update named columns of one permanent row; returns the row id."""
        descriptor = await self._descriptor(dataset_id)
        layout = self._layout(descriptor)
        if not values:
            raise ConfigurationError("No columns to update")

        types = dict(layout.columns)
        assignments = []
        params: Dict[str, Any] = {"row_id": row_id}
        for index, (column, value) in enumerate(values.items()):
            if column not in types:
                raise ConfigurationError(f"Column {column!r} is not part of dataset {dataset_id}")
            assignments.append(
                f"{quote_column(column)} = CAST(CAST(:v{index} AS TEXT) AS {types[column]})"
            )
            params[f"v{index}"] = None if value is None else str(value)

        sql = (
            f"UPDATE {quote_table(descriptor.permanent_table_name)} "
            f"SET {', '.join(assignments)} WHERE id = :row_id RETURNING id"
        )
        return await fetch_rows(self.db, sql, params)

    async def set_column_title(self, dataset_id: int, column: str, title: str) -> None:
        descriptor = await self._descriptor(dataset_id)
        columns = await self.datasets.staging_columns(descriptor.temp_table_name)
        if column not in {c["column_name"] for c in columns}:
            raise ConfigurationError(f"Column {column!r} is not part of {descriptor.temp_table_name}")
        await self.datasets.set_column_title(descriptor.temp_table_name, column, title)
        logger.debug("Title of %s.%s set to %r", descriptor.temp_table_name, column, title)

    async def _descriptor(self, dataset_id: int) -> DataEtlConf:
        descriptor = await self.datasets.get(dataset_id)
        if descriptor is None:
            raise UnknownDatasetError(f"Unknown dataset {dataset_id}")
        return descriptor

    @staticmethod
    def _layout(descriptor: DataEtlConf) -> DatasetLayout:
        layout: Optional[DatasetLayout] = TRANSFER_ROUTINES.get(descriptor.transfer_function_name or "")
        if layout is None:
            raise UnknownDatasetError(f"No layout registered for dataset {descriptor.id}")
        return layout
