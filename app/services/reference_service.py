"""
Reference service - back-office lookup tables and price-zone reports.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import Base
from app.db.query import Columns, Rows, describe_columns, fetch_rows
from app.errors import ConfigurationError, RefDataError
from app.models.reference import (
    CountryRoamingProhibited,
    IotLaunchesAndSteering,
    NextTcp,
    OperatorInfo,
    PzCutOffPoint,
    Sunset2G3G,
)
from app.repositories.reference_repository import ReferenceRepository, column_map, to_row
from app.services.report_sql import BAP_SQL, EPROFILE_SQL, PRICE_ZONE_TCP_SQL

logger = logging.getLogger(__name__)

TCP_NUMBERS = (1, 2, 3, 4, 5)
EPROFILE_NUMBERS = (1, 2, 3, 4, 5)


class InvalidTcpError(RefDataError):
    """A TCP or eProfile number outside 1-5."""

    kind = "validation"


class RowNotFoundError(RefDataError):
    kind = "not_found"


@dataclass(frozen=True)
class ReferenceTable:
    model: Type[Base]
    editable: bool = True


REFERENCE_TABLES: Dict[str, ReferenceTable] = {
    "operator-info": ReferenceTable(OperatorInfo),
    "sunset-2g-3g": ReferenceTable(Sunset2G3G),
    "countries-roaming-prohibited": ReferenceTable(CountryRoamingProhibited),
    "iot-launches-and-steering": ReferenceTable(IotLaunchesAndSteering, editable=False),
    "tcps": ReferenceTable(NextTcp, editable=False),
}


def check_tcp(tcp: int) -> int:
    if tcp not in TCP_NUMBERS:
        raise InvalidTcpError("Invalid TCP number")
    return tcp


class ReferenceService:
    """CRUD over the registered reference tables plus read-only reports."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_rows(self, table: str) -> tuple[Rows, Columns]:
        entry = self._table(table)
        objs = await ReferenceRepository(self.db, entry.model).list()
        rows = [to_row(obj) for obj in objs]
        return rows, describe_columns(["id", *column_map(entry.model)], rows)

    async def insert_row(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        entry = self._table(table, for_write=True)
        obj = await ReferenceRepository(self.db, entry.model).create(self._attributes(entry, values))
        logger.info("Inserted row %s into %s", obj.id, table)
        return to_row(obj)

    async def update_row(self, table: str, row_id: int, values: Dict[str, Any]) -> Dict[str, Any]:
        entry = self._table(table, for_write=True)
        repo = ReferenceRepository(self.db, entry.model)
        obj = await repo.get(row_id)
        if obj is None:
            raise RowNotFoundError(f"No row {row_id} in {table}")
        obj = await repo.update(obj, self._attributes(entry, values))
        logger.info("Updated row %s of %s", row_id, table)
        return to_row(obj)

    async def delete_row(self, table: str, row_id: int) -> Dict[str, Any]:
        entry = self._table(table, for_write=True)
        repo = ReferenceRepository(self.db, entry.model)
        obj = await repo.get(row_id)
        if obj is None:
            raise RowNotFoundError(f"No row {row_id} in {table}")
        row = to_row(obj)
        await repo.delete(obj)
        logger.info("Deleted row %s from %s", row_id, table)
        return row

    async def pz_cut_off_points(self, tcp: int) -> tuple[Rows, Columns]:
        check_tcp(tcp)
        objs = await ReferenceRepository(self.db, PzCutOffPoint).list(tcp_id=tcp)
        rows = [{"price_zone": o.price_zone, "cut_off_point": o.cut_off_point} for o in objs]
        return rows, describe_columns(["price_zone", "cut_off_point"], rows)

    async def bap_list(self, tcp: int) -> tuple[Rows, Columns]:
        return await fetch_rows(self.db, BAP_SQL, {"tcp": check_tcp(tcp)})

    async def price_zone_list(self, tcp: int) -> tuple[Rows, Columns]:
        # tcp is interpolated into a view name, only after the range check
        return await fetch_rows(self.db, PRICE_ZONE_TCP_SQL.format(tcp=check_tcp(tcp)))

    async def eprofile_list(self, profile: int) -> tuple[Rows, Columns]:
        if profile not in EPROFILE_NUMBERS:
            raise InvalidTcpError("Invalid eProfile number")
        return await fetch_rows(self.db, EPROFILE_SQL[profile])

    @staticmethod
    def _table(table: str, for_write: bool = False) -> ReferenceTable:
        entry: Optional[ReferenceTable] = REFERENCE_TABLES.get(table)
        if entry is None:
            raise ConfigurationError(f"Unknown reference table {table!r}")
        if for_write and not entry.editable:
            raise ConfigurationError(f"Reference table {table!r} is read-only")
        return entry

    @staticmethod
    def _attributes(entry: ReferenceTable, values: Dict[str, Any]) -> Dict[str, Any]:
        """Map client column names onto model attributes, rejecting unknown ones."""
        columns = column_map(entry.model)
        values = {key: value for key, value in values.items() if key != "id"}
        unknown: List[str] = [key for key in values if key not in columns]
        if unknown:
            raise ConfigurationError(f"Unknown columns {unknown}")
        return {columns[key]: value for key, value in values.items()}
