"""
Master list router - build, save and reload master lists.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_session, get_db
from app.errors import STATUS_ERROR, VersionNotFoundError, build_envelope, success
from app.schemas.master import MasterListRequest, SaveMasterVersionRequest
from app.services.master_service import DuplicateMasterVersionError, MasterService

router = APIRouter(
    prefix="/master",
    tags=["Master list"],
    dependencies=[Depends(get_current_session)],
)


@router.post("/list")
async def master_list(payload: MasterListRequest, db: AsyncSession = Depends(get_db)):
    """Master list assembled from the nine selected dataset versions."""
    rows, columns = await MasterService(db).master_list(payload.version_ids.model_dump())
    return success(data=rows, columns=columns)


@router.post("/nb-iot")
async def nb_iot(payload: MasterListRequest, db: AsyncSession = Depends(get_db)):
    rows, columns = await MasterService(db).nb_iot(payload.version_ids.model_dump())
    return success(data=rows, columns=columns)


@router.post("/cat-m")
async def cat_m(payload: MasterListRequest, db: AsyncSession = Depends(get_db)):
    rows, columns = await MasterService(db).cat_m(payload.version_ids.model_dump())
    return success(data=rows, columns=columns)


@router.get("/versions")
async def saved_versions(db: AsyncSession = Depends(get_db)):
    return success(data=await MasterService(db).saved_versions())


@router.get("/versions/{config_id}")
async def saved_version(config_id: int, db: AsyncSession = Depends(get_db)):
    """Rows of a saved master list and the version ids it was built from."""
    try:
        rows, columns, version_ids = await MasterService(db).saved_version(config_id)
    except VersionNotFoundError:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=build_envelope(STATUS_ERROR, message="Version not found"),
        )
    return success(data=rows, columns=columns, versionIds=version_ids)


@router.post("/versions")
async def save_version(payload: SaveMasterVersionRequest, db: AsyncSession = Depends(get_db)):
    """
    Save a version combination and materialize its master list.

    A combination that is already saved is rejected with 400.
    """
    try:
        saved = await MasterService(db).save_version(
            payload.version_name, payload.version_ids.model_dump()
        )
    except DuplicateMasterVersionError as exc:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=build_envelope(
                STATUS_ERROR,
                data={"masterConfigId": exc.master_config_id},
                message="This version already exists in the system. Please use different versions.",
            ),
        )
    return success(data=saved, message="Version saved successfully")
