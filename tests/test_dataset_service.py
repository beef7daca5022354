"""
Unit tests for loader browsing and row editing.
"""

import asyncio

import pytest

from app.errors import ConfigurationError, UnknownDatasetError
from app.services.dataset_service import DatasetService
from tests.fakes import FakeResult, FakeSession, descriptor, staging_column_rows

pytestmark = pytest.mark.unit

VOICE = descriptor(
    3,
    "transfer_tele2_voice_updated",
    "cm_data.t_tele2_voice_updated",
    "cm_temp.t_tele2_voice_updated_temp",
)


def test_version_rows_are_filtered_by_version(fake_state):
    fake_state.queue(FakeResult(scalar=VOICE), FakeResult([{"id": 1, "tadig": "AUTMM", "version_id": 12}]))
    service = DatasetService(FakeSession(fake_state))

    rows, columns = asyncio.run(service.get_version_rows(3, 12))

    assert rows == [{"id": 1, "tadig": "AUTMM", "version_id": 12}]
    assert [c["name"] for c in columns] == ["id", "tadig", "version_id"]
    assert 'FROM "cm_data"."t_tele2_voice_updated" WHERE version_id = :version_id' in fake_state.statements[-1]
    assert fake_state.params[-1] == {"version_id": 12}


def test_unknown_dataset(fake_state):
    fake_state.queue(FakeResult())
    service = DatasetService(FakeSession(fake_state))
    with pytest.raises(UnknownDatasetError):
        asyncio.run(service.get_version_rows(42, 1))


def test_update_row_casts_to_column_types(fake_state):
    fake_state.queue(FakeResult(scalar=VOICE), FakeResult([{"id": 7}]))
    service = DatasetService(FakeSession(fake_state))

    rows, _ = asyncio.run(service.update_row(3, 7, {"voice_mo": 0.5, "operator": None}))

    assert rows == [{"id": 7}]
    sql = fake_state.statements[-1]
    assert '"voice_mo" = CAST(CAST(:v0 AS TEXT) AS numeric)' in sql
    assert '"operator" = CAST(CAST(:v1 AS TEXT) AS text)' in sql
    assert fake_state.params[-1] == {"row_id": 7, "v0": "0.5", "v1": None}


def test_update_row_rejects_foreign_columns(fake_state):
    fake_state.queue(FakeResult(scalar=VOICE))
    service = DatasetService(FakeSession(fake_state))
    with pytest.raises(ConfigurationError):
        asyncio.run(service.update_row(3, 7, {"version_id": 1}))


def test_column_title_requires_staging_column(fake_state):
    fake_state.queue(FakeResult(scalar=VOICE), FakeResult(staging_column_rows("tadig", "country")))
    service = DatasetService(FakeSession(fake_state))
    with pytest.raises(ConfigurationError):
        asyncio.run(service.set_column_title(3, "voice_mo", "Voice MO"))
