"""
Version registry - database operations for DatasetVersion.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import PersistenceError
from app.models.etl_conf import DatasetVersion


class VersionRepository:
    """Repository for DatasetVersion database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_version(self, dataset_id: int, label: str) -> DatasetVersion:
        """
        Register a new version of a dataset.

        The version date is assigned by the database. Labels are not unique:
        two versions of the same dataset may share one.

        Raises:
            PersistenceError: unknown dataset id or store failure
        """
        version = DatasetVersion(etl_conf_id=dataset_id, version_name=label)
        try:
            self.db.add(version)
            await self.db.flush()
            await self.db.refresh(version)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not create version {label!r} for dataset {dataset_id}: {exc}") from exc
        return version

    async def resolve_version_id(self, label: str, dataset_id: int) -> Optional[int]:
        """Return the newest version id carrying this label for the dataset."""
        try:
            result = await self.db.execute(
                select(DatasetVersion.id)
                .where(
                    DatasetVersion.etl_conf_id == dataset_id,
                    DatasetVersion.version_name == label,
                )
                .order_by(DatasetVersion.id.desc())
                .limit(1)
            )
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc
        return result.scalar_one_or_none()

    async def get_display_label(self, version_id: int) -> Optional[str]:
        """Display label of a version, `<label> ( <date> )`; None for an unknown id."""
        try:
            result = await self.db.execute(
                select(DatasetVersion).where(DatasetVersion.id == version_id)
            )
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc
        version = result.scalar_one_or_none()
        return version.display_name if version is not None else None

    async def list_versions(self, dataset_id: int) -> list[DatasetVersion]:
        """All versions of a dataset, oldest first."""
        result = await self.db.execute(
            select(DatasetVersion)
            .where(DatasetVersion.etl_conf_id == dataset_id)
            .order_by(DatasetVersion.id.asc())
        )
        return list(result.scalars().all())
