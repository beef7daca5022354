"""
Unit tests for the upload path: validate -> stage -> register version -> transfer.
"""

import asyncio
import base64
from datetime import date

import pytest

from app.core.config import settings
from app.errors import ConfigurationError, EmptyUploadError, PersistenceError, UnknownDatasetError, ValidationError
from app.models.etl_conf import DatasetVersion
from app.services.staging_loader import StagingLoader
from app.services.transfer_dispatcher import TransferDispatcher
from app.services.upload_service import UploadService, decode_payload
from tests.fakes import FakeResult, descriptor, staging_column_rows

pytestmark = pytest.mark.unit

STAGING = "cm_temp.t_tele2_voice_updated_temp"
CSV = base64.b64encode(b"tadig,voice_mo\nAUTMM,0.1\n").decode()


class StubLoader:
    def __init__(self, rows=1, error=None):
        self.rows = rows
        self.error = error
        self.calls = []

    async def load(self, payload, encoding, table_ref, header_row_index):
        self.calls.append((payload, encoding, table_ref, header_row_index))
        if self.error:
            raise self.error
        return self.rows


class StubDispatcher:
    def __init__(self, result=True):
        self.result = result
        self.resolved = []
        self.calls = []

    async def resolve(self, dataset_id):
        self.resolved.append(dataset_id)
        return self.append

    async def append(self, staging_table_ref, label, dataset_id):
        self.calls.append((dataset_id, staging_table_ref, label))
        return self.result


def make_service(session_factory, fake_state, loader=None, dispatcher=None):
    fake_state.queue(
        FakeResult([descriptor(3, "transfer_tele2_voice_updated", "cm_data.t_tele2_voice_updated", STAGING)]),
        FakeResult(scalar=DatasetVersion(id=1, etl_conf_id=3, version_name="2024-Q1", version_date=date(2024, 4, 1))),
    )
    return UploadService(
        session_factory,
        loader=loader or StubLoader(),
        dispatcher=dispatcher or StubDispatcher(),
    )


def test_decode_payload_rejects_invalid_base64():
    with pytest.raises(ValidationError):
        decode_payload("not base64!!")


def test_upload_stages_then_versions_then_transfers(session_factory, fake_state):
    loader = StubLoader(rows=1)
    dispatcher = StubDispatcher()
    service = make_service(session_factory, fake_state, loader, dispatcher)

    result = asyncio.run(service.upload(CSV, 3, "2024-Q1", "csv", skip_rows=0))

    assert result.row_count == 1
    assert result.version_id == 1
    assert loader.calls[0][1:] == ("csv", STAGING, 0)
    assert dispatcher.resolved == [3]
    assert dispatcher.calls == [(3, STAGING, "2024-Q1")]
    versions = [obj for obj in fake_state.added if isinstance(obj, DatasetVersion)]
    assert [(v.etl_conf_id, v.version_name) for v in versions] == [(3, "2024-Q1")]


def test_upload_defaults_header_row(session_factory, fake_state):
    loader = StubLoader()
    service = make_service(session_factory, fake_state, loader)

    asyncio.run(service.upload(CSV, 3, "2024-Q1", "csv"))

    assert loader.calls[0][3] == settings.DEFAULT_SKIP_ROWS


def test_empty_upload_creates_no_version(session_factory, fake_state):
    loader = StubLoader(error=EmptyUploadError("All data rows are empty"))
    dispatcher = StubDispatcher()
    service = make_service(session_factory, fake_state, loader, dispatcher)

    with pytest.raises(EmptyUploadError):
        asyncio.run(service.upload(CSV, 3, "2024-Q1", "csv", skip_rows=0))

    assert fake_state.added == []
    assert dispatcher.calls == []


def test_failed_transfer_is_reported(session_factory, fake_state):
    service = make_service(session_factory, fake_state, dispatcher=StubDispatcher(result=False))

    with pytest.raises(PersistenceError):
        asyncio.run(service.upload(CSV, 3, "2024-Q1", "csv", skip_rows=0))


def test_client_table_name_must_match_configuration(session_factory, fake_state):
    loader = StubLoader()
    service = make_service(session_factory, fake_state, loader)

    with pytest.raises(ConfigurationError):
        asyncio.run(service.upload(CSV, 3, "2024-Q1", "csv", skip_rows=0, table_name="cm_data.t_operator_info"))
    assert loader.calls == []


def test_unknown_dataset(session_factory, fake_state):
    service = UploadService(session_factory, loader=StubLoader(), dispatcher=StubDispatcher())
    fake_state.queue(FakeResult())

    with pytest.raises(UnknownDatasetError):
        asyncio.run(service.upload(CSV, 99, "2024-Q1", "csv", skip_rows=0))


def test_decode_payload_accepts_line_wrapped_base64():
    raw = b"tadig,voice_mo\n" + b"AUTMM,0.1\n" * 20
    assert decode_payload(base64.encodebytes(raw).decode()) == raw


def test_upload_reports_display_label(session_factory, fake_state):
    service = make_service(session_factory, fake_state)

    result = asyncio.run(service.upload(CSV, 3, "2024-Q1", "csv", skip_rows=0))

    assert result.version_name == "2024-Q1 ( 2024-04-01 )"


def test_dataset_without_routine_fails_before_any_write(session_factory, fake_state):
    routineless = descriptor(3, None, "cm_data.t_tele2_voice_updated", STAGING)
    fake_state.queue(FakeResult([routineless]), FakeResult([routineless]), FakeResult(staging_column_rows("tadig")))
    service = UploadService(
        session_factory,
        loader=StagingLoader(session_factory),
        dispatcher=TransferDispatcher(session_factory),
    )

    with pytest.raises(UnknownDatasetError):
        asyncio.run(service.upload(CSV, 3, "2024-Q1", "csv", skip_rows=0))

    assert not any(sql.startswith(("TRUNCATE", "INSERT")) for sql in fake_state.statements)
    assert fake_state.added == []
