"""
Models package.

Import all models here so they are registered with SQLAlchemy.
This file also makes it easy to import models from one place.
"""

from app.models.etl_conf import ImsiDonor, DataEtlConf, DatasetVersion
from app.models.master_config import MasterConfig
from app.models.reference import (
    OperatorInfo,
    Sunset2G3G,
    CountryRoamingProhibited,
    IotLaunchesAndSteering,
    NextTcp,
    PzCutOffPoint,
)

# Export all models
__all__ = [
    "ImsiDonor",
    "DataEtlConf",
    "DatasetVersion",
    "MasterConfig",
    "OperatorInfo",
    "Sunset2G3G",
    "CountryRoamingProhibited",
    "IotLaunchesAndSteering",
    "NextTcp",
    "PzCutOffPoint",
]
