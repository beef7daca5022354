"""Screens router."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_session, get_db
from app.errors import success
from app.services.screens_service import get_screens_config

router = APIRouter(
    prefix="/screens",
    tags=["Screens"],
    dependencies=[Depends(get_current_session)],
)


@router.get("/config")
async def screens_config(db: AsyncSession = Depends(get_db)):
    """UI navigation tree with the permissions of each sub screen."""
    rows, columns = await get_screens_config(db)
    return success(data=rows, columns=columns)
