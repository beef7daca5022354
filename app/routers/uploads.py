"""
Uploads router - dataset loaders, file uploads and version browsing.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.dependencies import get_current_session, get_db, get_session_factory
from app.errors import success
from app.schemas.upload import ColumnTitleRequest, RowUpdateRequest, UploadRequest, UploadResultRead
from app.services.dataset_service import DatasetService
from app.services.staging_loader import ENCODING_CSV, ENCODING_XLSX
from app.services.upload_service import UploadService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/uploads",
    tags=["Uploads"],
    dependencies=[Depends(get_current_session)],
)


def get_upload_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> UploadService:
    return UploadService(session_factory)


async def _upload(payload: UploadRequest, encoding: str, service: UploadService) -> dict:
    result = await service.upload(
        data=payload.data,
        dataset_id=payload.dataset_id,
        version_name=payload.version_name,
        encoding=encoding,
        skip_rows=payload.skip_rows,
        table_name=payload.table_name,
    )
    version = UploadResultRead(version_id=result.version_id, version_name=result.version_name)
    return success(
        data=[version.model_dump()],
        message=f"Successfully uploaded {result.row_count} rows",
    )


@router.get("/loaders")
async def list_loaders(db: AsyncSession = Depends(get_db)):
    """Every dataset with its IMSI donor, versions and staging columns."""
    loaders = await DatasetService(db).list_loaders()
    return success(data=loaders)


@router.post("/excel")
async def upload_excel(
    payload: UploadRequest,
    service: UploadService = Depends(get_upload_service),
):
    """Upload a base64-encoded xlsx workbook (first sheet)."""
    return await _upload(payload, payload.encoding or ENCODING_XLSX, service)


@router.post("/csv")
async def upload_csv(
    payload: UploadRequest,
    service: UploadService = Depends(get_upload_service),
):
    """Upload a base64-encoded UTF-8 CSV file."""
    return await _upload(payload, payload.encoding or ENCODING_CSV, service)


@router.get("/datasets/{dataset_id}/versions/{version_id}")
async def get_version_rows(
    dataset_id: int,
    version_id: int,
    db: AsyncSession = Depends(get_db),
):
    rows, columns = await DatasetService(db).get_version_rows(dataset_id, version_id)
    return success(data=rows, columns=columns)


@router.patch("/datasets/{dataset_id}/rows/{row_id}")
async def update_row(
    dataset_id: int,
    row_id: int,
    payload: RowUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Update columns of one row of the dataset's permanent table."""
    rows, columns = await DatasetService(db).update_row(dataset_id, row_id, payload.values)
    return success(data=rows, columns=columns)


@router.patch("/datasets/{dataset_id}/columns/{column_name}/title")
async def set_column_title(
    dataset_id: int,
    column_name: str,
    payload: ColumnTitleRequest,
    db: AsyncSession = Depends(get_db),
):
    await DatasetService(db).set_column_title(dataset_id, column_name, payload.title)
    return success(data=[{"column_name": column_name, "title": payload.title}])
