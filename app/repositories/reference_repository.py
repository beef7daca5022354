"""
Reference table repository - generic CRUD over one mapped reference model.
"""

from typing import Any, Dict, List, Optional, Type

from sqlalchemy import inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import Base
from app.errors import PersistenceError


def column_map(model: Type[Base]) -> Dict[str, str]:
    """Database column name -> mapped attribute key, primary key excluded."""
    mapper = inspect(model)
    return {
        attr.columns[0].name: attr.key
        for attr in mapper.column_attrs
        if not attr.columns[0].primary_key
    }


def to_row(obj: Base) -> Dict[str, Any]:
    """Serialize a model instance keyed by database column names."""
    mapper = inspect(type(obj))
    return {attr.columns[0].name: getattr(obj, attr.key) for attr in mapper.column_attrs}


class ReferenceRepository:
    """Repository for one reference table."""

    def __init__(self, db: AsyncSession, model: Type[Base]):
        self.db = db
        self.model = model

    async def list(self, **filters: Any) -> List[Base]:
        query = select(self.model)
        for key, value in filters.items():
            query = query.where(getattr(self.model, key) == value)
        query = query.order_by(self.model.id)
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc
        return list(result.scalars().all())

    async def get(self, row_id: int) -> Optional[Base]:
        try:
            return await self.db.get(self.model, row_id)
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc

    async def create(self, values: Dict[str, Any]) -> Base:
        obj = self.model(**values)
        self.db.add(obj)
        try:
            await self.db.flush()
            await self.db.refresh(obj)
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc
        return obj

    async def update(self, obj: Base, values: Dict[str, Any]) -> Base:
        for key, value in values.items():
            setattr(obj, key, value)
        try:
            await self.db.flush()
            await self.db.refresh(obj)
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc
        return obj

    async def delete(self, obj: Base) -> None:
        try:
            await self.db.delete(obj)
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc
