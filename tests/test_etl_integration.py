"""
End-to-end ETL tests against a migrated PostgreSQL database.

Run with RUN_DB_TESTS=1 after `alembic upgrade head` on the database named by
DATABASE_URL.
"""

import asyncio
import base64
from decimal import Decimal

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.config import settings
from app.errors import EmptyUploadError, PersistenceError, UnknownTransferRoutineError
from app.repositories.version_repository import VersionRepository
from app.services.transfer_dispatcher import TransferDispatcher
from app.services.upload_service import UploadService

pytestmark = pytest.mark.db

VOICE_DATASET = 3
STAGING = "cm_temp.t_tele2_voice_updated_temp"
PERMANENT = "cm_data.t_tele2_voice_updated"

# NullPool: every asyncio.run gets fresh connections on its own loop
engine = create_async_engine(settings.DATABASE_URL, poolclass=NullPool)
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)

VOICE_CSV = (
    "Tele2 voice prices\n"
    "tadig,country,operator,voice_mo,voice_mt\n"
    "AUTMM,Austria,A1,0.12,0.03\n"
    ",,,,\n"
    "BELMO,Belgium,Proximus,0.2,0.05\n"
)


def b64(content: str) -> str:
    return base64.b64encode(content.encode("utf-8")).decode()


async def scalar(sql: str, **params):
    async with async_session_maker() as session:
        result = await session.execute(text(sql), params)
        return result.scalar()


async def cleanup(label: str) -> None:
    async with async_session_maker() as session:
        async with session.begin():
            await session.execute(
                text(
                    f"DELETE FROM {PERMANENT} WHERE version_id IN ("
                    "SELECT id FROM cm_conf.t_data_imsi_donor_versions "
                    "WHERE etl_conf_id = :dataset AND version_name = :label)"
                ),
                {"dataset": VOICE_DATASET, "label": label},
            )
            await session.execute(
                text(
                    "DELETE FROM cm_conf.t_data_imsi_donor_versions "
                    "WHERE etl_conf_id = :dataset AND version_name = :label"
                ),
                {"dataset": VOICE_DATASET, "label": label},
            )


async def resolve(label: str):
    async with async_session_maker() as session:
        return await VersionRepository(session).resolve_version_id(label, VOICE_DATASET)


async def row_ids(version_id: int) -> set:
    async with async_session_maker() as session:
        result = await session.execute(
            text(f"SELECT id FROM {PERMANENT} WHERE version_id = :v"), {"v": version_id}
        )
        return {row[0] for row in result.all()}


def count_versions(label: str) -> int:
    return asyncio.run(
        scalar(
            "SELECT count(*) FROM cm_conf.t_data_imsi_donor_versions "
            "WHERE etl_conf_id = :dataset AND version_name = :label",
            dataset=VOICE_DATASET,
            label=label,
        )
    )


def test_upload_appends_rows_under_new_version():
    label = "itest-append"
    asyncio.run(cleanup(label))
    service = UploadService(async_session_maker)

    result = asyncio.run(service.upload(b64(VOICE_CSV), VOICE_DATASET, label, "csv", skip_rows=1))

    assert result.row_count == 2
    assert asyncio.run(scalar(f"SELECT count(*) FROM {STAGING}")) == 2
    assert asyncio.run(
        scalar(f"SELECT count(*) FROM {PERMANENT} WHERE version_id = :v", v=result.version_id)
    ) == 2
    assert asyncio.run(
        scalar(f"SELECT voice_mo FROM {PERMANENT} WHERE version_id = :v AND tadig = 'AUTMM'", v=result.version_id)
    ) == Decimal("0.12")

    # A second upload with the same label appends under its own version
    second = asyncio.run(service.upload(b64(VOICE_CSV), VOICE_DATASET, label, "csv", skip_rows=1))
    assert second.version_id > result.version_id
    assert asyncio.run(
        scalar(f"SELECT count(*) FROM {PERMANENT} WHERE version_id = :v", v=result.version_id)
    ) == 2
    assert asyncio.run(
        scalar(f"SELECT count(*) FROM {PERMANENT} WHERE version_id = :v", v=second.version_id)
    ) == 2
    # The repeated label now resolves to the newer version
    assert asyncio.run(resolve(label)) == second.version_id

    asyncio.run(cleanup(label))


def test_empty_upload_creates_no_version_and_empties_staging():
    label = "itest-empty"
    asyncio.run(cleanup(label))
    service = UploadService(async_session_maker)

    with pytest.raises(EmptyUploadError):
        asyncio.run(service.upload(b64("title\ntadig,country\n,,\n"), VOICE_DATASET, label, "csv", skip_rows=1))

    assert count_versions(label) == 0
    assert asyncio.run(scalar(f"SELECT count(*) FROM {STAGING}")) == 0


def test_bad_value_rolls_back_whole_transfer():
    label = "itest-rollback"
    asyncio.run(cleanup(label))
    service = UploadService(async_session_maker)
    bad = "tadig,country,operator,voice_mo,voice_mt\nAUTMM,Austria,A1,0.1,0.1\nBELMO,Belgium,Proximus,abc,0.1\n"

    with pytest.raises(PersistenceError):
        asyncio.run(service.upload(b64(bad), VOICE_DATASET, label, "csv", skip_rows=0))

    # The version row stays registered without data
    assert count_versions(label) == 1
    assert asyncio.run(
        scalar(
            f"SELECT count(*) FROM {PERMANENT} p JOIN cm_conf.t_data_imsi_donor_versions v "
            "ON p.version_id = v.id WHERE v.version_name = :label",
            label=label,
        )
    ) == 0

    asyncio.run(cleanup(label))


def test_unregistered_routine_is_rejected():
    dispatcher = TransferDispatcher(async_session_maker, routines={})
    with pytest.raises(UnknownTransferRoutineError):
        asyncio.run(dispatcher.resolve(VOICE_DATASET))


def test_distinct_labels_resolve_to_disjoint_versions():
    labels = ("itest-Jan", "itest-Feb")
    for label in labels:
        asyncio.run(cleanup(label))
    service = UploadService(async_session_maker)
    jan_csv = "tadig,country,operator,voice_mo,voice_mt\nAUTMM,Austria,A1,0.12,0.03\n"
    feb_csv = jan_csv + "BELMO,Belgium,Proximus,0.2,0.05\n"

    jan = asyncio.run(service.upload(b64(jan_csv), VOICE_DATASET, labels[0], "csv", skip_rows=0))
    feb = asyncio.run(service.upload(b64(feb_csv), VOICE_DATASET, labels[1], "csv", skip_rows=0))

    assert asyncio.run(resolve(labels[0])) == jan.version_id
    assert asyncio.run(resolve(labels[1])) == feb.version_id
    assert jan.version_id != feb.version_id

    jan_rows = asyncio.run(row_ids(jan.version_id))
    feb_rows = asyncio.run(row_ids(feb.version_id))
    assert len(jan_rows) == 1
    assert len(feb_rows) == 2
    assert jan_rows.isdisjoint(feb_rows)

    for label in labels:
        asyncio.run(cleanup(label))
