"""
Schemas package.

Request and response bodies of the API.
"""

from app.schemas.auth import LoginRequest, LoginResponse
from app.schemas.master import MasterListRequest, MasterVersionIds, SaveMasterVersionRequest
from app.schemas.upload import ColumnTitleRequest, RowUpdateRequest, UploadRequest, UploadResultRead

__all__ = [
    "LoginRequest",
    "LoginResponse",
    "MasterListRequest",
    "MasterVersionIds",
    "SaveMasterVersionRequest",
    "ColumnTitleRequest",
    "RowUpdateRequest",
    "UploadRequest",
    "UploadResultRead",
]
