"""
Upload and dataset editing schemas.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field


class UploadRequest(BaseModel):
    """
    One upload.

    data is the base64-encoded file. skip_rows is the zero-based index of the
    last title/header row; data starts on the row after it.
    """

    data: str = Field(..., min_length=1)
    dataset_id: int
    version_name: str = Field(..., min_length=1, max_length=200)
    skip_rows: Optional[int] = Field(None, ge=0)
    encoding: Optional[Literal["csv", "xlsx"]] = None
    # Optional; must match the dataset's configured staging table
    table_name: Optional[str] = None


class UploadResultRead(BaseModel):
    version_id: int
    version_name: str


class RowUpdateRequest(BaseModel):
    """Column name -> new value for one permanent row."""

    values: Dict[str, Any] = Field(..., min_length=1)


class ColumnTitleRequest(BaseModel):
    title: str = Field(..., max_length=500)
