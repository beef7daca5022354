"""
Master list schemas.

The nine dataset versions a master list is built from are accepted either by
name or by their position key ("1".."9") used by the UI.
"""

from pydantic import BaseModel, ConfigDict, Field


class MasterVersionIds(BaseModel):
    """One version id per source dataset."""

    model_config = ConfigDict(populate_by_name=True)

    tele2_coverage: int = Field(..., alias="1")
    tele2_updated: int = Field(..., alias="2")
    tele2_voice_updated: int = Field(..., alias="3")
    tim_sparkle_price_updated: int = Field(..., alias="4")
    tim_sparkle_roaming_updated: int = Field(..., alias="5")
    hot_mobile_updated: int = Field(..., alias="6")
    bics_coverage_bands_updated: int = Field(..., alias="7")
    bics_coverage_updated: int = Field(..., alias="8")
    bics_price_updated: int = Field(..., alias="9")


class MasterListRequest(BaseModel):
    version_ids: MasterVersionIds


class SaveMasterVersionRequest(BaseModel):
    version_name: str = Field(..., min_length=1, max_length=200)
    version_ids: MasterVersionIds
