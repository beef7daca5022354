"""
Reference router - lookup tables, TCP configuration and price-zone reports.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_session, get_db
from app.errors import failure, success
from app.services.reference_service import InvalidTcpError, ReferenceService

router = APIRouter(
    prefix="/reference",
    tags=["Reference"],
    dependencies=[Depends(get_current_session)],
)


@router.get("/tables/{table}")
async def list_rows(table: str, db: AsyncSession = Depends(get_db)):
    rows, columns = await ReferenceService(db).list_rows(table)
    return success(data=rows, columns=columns)


@router.post("/tables/{table}")
async def insert_row(
    table: str,
    values: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
):
    row = await ReferenceService(db).insert_row(table, values)
    return success(data=[row])


@router.put("/tables/{table}/{row_id}")
async def update_row(
    table: str,
    row_id: int,
    values: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
):
    row = await ReferenceService(db).update_row(table, row_id, values)
    return success(data=[row])


@router.delete("/tables/{table}/{row_id}")
async def delete_row(table: str, row_id: int, db: AsyncSession = Depends(get_db)):
    row = await ReferenceService(db).delete_row(table, row_id)
    return success(data=[row])


@router.get("/tcps/{tcp}/cut-off-points")
async def pz_cut_off_points(tcp: int, db: AsyncSession = Depends(get_db)):
    try:
        rows, columns = await ReferenceService(db).pz_cut_off_points(tcp)
    except InvalidTcpError as exc:
        return failure(str(exc), data=[])
    return success(data=rows, columns=columns)


@router.get("/tcps/{tcp}/baps")
async def bap_list(tcp: int, db: AsyncSession = Depends(get_db)):
    """Next-carrier BAP list of one TCP."""
    try:
        rows, columns = await ReferenceService(db).bap_list(tcp)
    except InvalidTcpError as exc:
        return failure(str(exc), data=[])
    return success(data=rows, columns=columns)


@router.get("/tcps/{tcp}/price-zones")
async def price_zone_list(tcp: int, db: AsyncSession = Depends(get_db)):
    try:
        rows, columns = await ReferenceService(db).price_zone_list(tcp)
    except InvalidTcpError as exc:
        return failure(str(exc), data=[])
    return success(data=rows, columns=columns)


@router.get("/eprofiles/{profile}/price-zones")
async def eprofile_list(profile: int, db: AsyncSession = Depends(get_db)):
    try:
        rows, columns = await ReferenceService(db).eprofile_list(profile)
    except InvalidTcpError as exc:
        return failure(str(exc), data=[])
    return success(data=rows, columns=columns)
