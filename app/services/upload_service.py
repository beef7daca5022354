"""
Upload service - the ETL path behind the upload endpoints.

validate payload -> resolve dataset and routine -> stage rows -> register
version -> transfer into the permanent table. Configuration problems are
found before the first write. Each write step runs in its own transaction;
nothing is retried.
"""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.config import settings
from app.errors import (
    ConfigurationError,
    PersistenceError,
    UnknownDatasetError,
    ValidationError,
    VersionNotFoundError,
)
from app.repositories.dataset_repository import DatasetRepository
from app.repositories.version_repository import VersionRepository
from app.services.staging_loader import StagingLoader
from app.services.transfer_dispatcher import TransferDispatcher

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    version_id: int
    version_name: str
    row_count: int


def decode_payload(data: str) -> bytes:
    """Decode base64, line-wrapped (MIME) input included."""
    try:
        return base64.b64decode("".join(data.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError(f"Payload is not valid base64: {exc}") from exc


class UploadService:
    """Runs one upload end to end."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        loader: Optional[StagingLoader] = None,
        dispatcher: Optional[TransferDispatcher] = None,
    ):
        self.session_factory = session_factory
        self.loader = loader or StagingLoader(session_factory)
        self.dispatcher = dispatcher or TransferDispatcher(session_factory)

    async def upload(
        self,
        data: str,
        dataset_id: int,
        version_name: str,
        encoding: str,
        skip_rows: Optional[int] = None,
        table_name: Optional[str] = None,
    ) -> UploadResult:
        """
        Stage and transfer one upload.

        Raises:
            ValidationError: undecodable or empty payload
            ConfigurationError: unknown dataset, missing transfer routine or
                mismatched staging table; raised before anything is written
            PersistenceError: store failure, or the transfer reported failure
        """
        header_row_index = settings.DEFAULT_SKIP_ROWS if skip_rows is None else skip_rows
        payload = decode_payload(data)
        staging_table = await self._staging_table(dataset_id, table_name)
        routine = await self.dispatcher.resolve(dataset_id)

        logger.debug(
            "Upload for dataset %s: %d bytes, %s, header row %d, version %r",
            dataset_id,
            len(payload),
            encoding,
            header_row_index,
            version_name,
        )

        row_count = await self.loader.load(payload, encoding, staging_table, header_row_index)
        version_id = await self._create_version(dataset_id, version_name)

        transferred = await routine(staging_table, version_name, dataset_id)
        if not transferred:
            # The version row stays committed without data
            raise PersistenceError(
                f"Transfer of {staging_table} into version {version_id} failed"
            )

        display_name = await self._display_label(version_id)
        logger.info(
            "Uploaded %d rows for dataset %s as version %s (%s)",
            row_count,
            dataset_id,
            version_id,
            display_name,
        )
        return UploadResult(version_id=version_id, version_name=display_name, row_count=row_count)

    async def _staging_table(self, dataset_id: int, table_name: Optional[str]) -> str:
        async with self.session_factory() as session:
            descriptor = await DatasetRepository(session).get(dataset_id)
        if descriptor is None:
            raise UnknownDatasetError(f"Unknown dataset {dataset_id}")
        if table_name and table_name != descriptor.temp_table_name:
            raise ConfigurationError(
                f"Dataset {dataset_id} stages into {descriptor.temp_table_name}, not {table_name}"
            )
        return descriptor.temp_table_name

    async def _create_version(self, dataset_id: int, version_name: str) -> int:
        async with self.session_factory() as session:
            async with session.begin():
                version = await VersionRepository(session).create_version(dataset_id, version_name)
                return version.id

    async def _display_label(self, version_id: int) -> str:
        async with self.session_factory() as session:
            label = await VersionRepository(session).get_display_label(version_id)
        if label is None:
            raise VersionNotFoundError(f"Version {version_id} disappeared after transfer")
        return label
