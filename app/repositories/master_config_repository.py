"""
Master configuration repository - database operations for MasterConfig.
"""

from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import PersistenceError
from app.models.master_config import MasterConfig


class MasterConfigRepository:
    """Repository for saved master list configurations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_versions(self, version_ids: Dict[str, int]) -> Optional[MasterConfig]:
        """Return the saved configuration built from exactly these versions."""
        query = select(MasterConfig)
        for column, version_id in version_ids.items():
            query = query.where(getattr(MasterConfig, column) == version_id)
        try:
            result = await self.db.execute(query.order_by(MasterConfig.id).limit(1))
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc
        return result.scalar_one_or_none()

    async def create(self, version_name: str, version_ids: Dict[str, int]) -> MasterConfig:
        config = MasterConfig(version_name=version_name, **version_ids)
        self.db.add(config)
        try:
            await self.db.flush()
            await self.db.refresh(config)
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc
        return config

    async def get(self, config_id: int) -> Optional[MasterConfig]:
        result = await self.db.execute(
            select(MasterConfig).where(MasterConfig.id == config_id)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[MasterConfig]:
        result = await self.db.execute(select(MasterConfig).order_by(MasterConfig.id))
        return list(result.scalars().all())
