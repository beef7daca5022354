"""
Transfer dispatcher.

Moves staged rows into a dataset's permanent table under a version id.
The routine for a dataset is looked up by the name stored in its descriptor,
in the closed TRANSFER_ROUTINES registry; every routine runs the same
set-based append with its own column layout.
"""

import functools
import logging
from typing import Awaitable, Callable, Mapping, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.errors import (
    ConfigurationError,
    RefDataError,
    UnknownDatasetError,
    UnknownTransferRoutineError,
    VersionNotFoundError,
)
from app.repositories.dataset_repository import DatasetRepository
from app.repositories.version_repository import VersionRepository
from app.services.dataset_layouts import TRANSFER_ROUTINES, DatasetLayout
from app.utils.sql_identifiers import quote_column, quote_table

logger = logging.getLogger(__name__)

AppendRoutine = Callable[[str, str, int], Awaitable[bool]]


def build_append_sql(layout: DatasetLayout, staging_table_ref: str) -> str:
    """INSERT ... SELECT copying every staged row, cast to the destination types."""
    columns = ", ".join(quote_column(name) for name in layout.column_names)
    selected = ", ".join(
        f"{quote_column(name)}::{sql_type}" for name, sql_type in layout.columns
    )
    return (
        f"INSERT INTO {quote_table(layout.permanent_table)} ({columns}, version_id) "
        f"SELECT {selected}, :version_id FROM {quote_table(staging_table_ref)}"
    )


async def verify_transfer_registry(
    session_factory: async_sessionmaker,
    routines: Optional[Mapping[str, DatasetLayout]] = None,
) -> None:
    """
    Check that every dataset names a transfer routine that is registered.

    Run at startup so configuration drift stops the service instead of
    failing individual uploads.

    Raises:
        UnknownTransferRoutineError: listing every dataset with no implementation
    """
    routines = TRANSFER_ROUTINES if routines is None else routines
    async with session_factory() as session:
        configured = await DatasetRepository(session).list_routine_names()

    missing = {
        dataset_id: name
        for dataset_id, name in configured.items()
        if not name or name not in routines
    }
    if missing:
        raise UnknownTransferRoutineError(
            "Datasets without an implemented transfer routine: "
            + ", ".join(f"dataset {dataset_id} -> {name!r}" for dataset_id, name in sorted(missing.items()))
        )
    logger.info("Transfer registry verified for %d datasets", len(configured))


class TransferDispatcher:
    """Resolves and runs the append routine configured for a dataset."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        routines: Optional[Mapping[str, DatasetLayout]] = None,
    ):
        self.session_factory = session_factory
        self.routines = TRANSFER_ROUTINES if routines is None else routines

    async def resolve(self, dataset_id: int) -> AppendRoutine:
        """
        Find the append routine for a dataset.

        Raises:
            UnknownDatasetError: no descriptor, or no routine name configured
            UnknownTransferRoutineError: routine name not in the registry
            ConfigurationError: registry layout targets another permanent table
        """
        async with self.session_factory() as session:
            descriptor = await DatasetRepository(session).get(dataset_id)

        if descriptor is None or not descriptor.transfer_function_name:
            raise UnknownDatasetError(f"No transfer function defined for dataset {dataset_id}")

        routine_name = descriptor.transfer_function_name
        layout = self.routines.get(routine_name)
        if layout is None:
            raise UnknownTransferRoutineError(f"Transfer function {routine_name!r} does not exist")

        if layout.permanent_table != descriptor.permanent_table_name:
            raise ConfigurationError(
                f"Routine {routine_name!r} writes {layout.permanent_table}, "
                f"dataset {dataset_id} is configured for {descriptor.permanent_table_name}"
            )

        logger.debug("Dataset %s uses transfer routine %s", dataset_id, routine_name)
        return functools.partial(self.append, layout)

    async def dispatch(self, dataset_id: int, staging_table_ref: str, label: str) -> bool:
        routine = await self.resolve(dataset_id)
        return await routine(staging_table_ref, label, dataset_id)

    async def append(self, layout: DatasetLayout, staging_table_ref: str, label: str, dataset_id: int) -> bool:
        """
        Copy the staging table into the permanent table under one version.

        Runs in a single transaction. Any failure rolls the whole copy back
        and is reported as False.
        """
        insert_sql = build_append_sql(layout, staging_table_ref)
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    version_id = await VersionRepository(session).resolve_version_id(label, dataset_id)
                    if version_id is None:
                        raise VersionNotFoundError(
                            f"No version {label!r} registered for dataset {dataset_id}"
                        )
                    result = await session.execute(text(insert_sql), {"version_id": version_id})
        except (RefDataError, SQLAlchemyError) as exc:
            logger.error(
                "%s failed for dataset %s, version %r: %s",
                layout.routine_name,
                dataset_id,
                label,
                exc,
            )
            return False

        logger.info(
            "%s appended %s rows into %s as version %s",
            layout.routine_name,
            result.rowcount,
            layout.permanent_table,
            version_id,
        )
        return True
