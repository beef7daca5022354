"""
Unit tests for the reference table registry and reports.
"""

import asyncio

import pytest

from app.errors import ConfigurationError
from app.models.reference import IotLaunchesAndSteering, OperatorInfo
from app.repositories.reference_repository import column_map, to_row
from app.services.reference_service import InvalidTcpError, ReferenceService
from tests.fakes import FakeResult, FakeSession

pytestmark = pytest.mark.unit


def test_column_map_uses_database_names():
    columns = column_map(IotLaunchesAndSteering)
    assert columns["5g_nsa_date_outbound"] == "nsa_5g_date_outbound"
    assert "id" not in columns


def test_to_row_keys_by_column_name():
    row = to_row(IotLaunchesAndSteering(id=1, nsa_5g_date_outbound="2023-01"))
    assert row["5g_nsa_date_outbound"] == "2023-01"
    assert row["id"] == 1


def test_insert_operator(fake_state):
    service = ReferenceService(FakeSession(fake_state))
    row = asyncio.run(
        service.insert_row("operator-info", {"id": 99, "plmno_code": "AUTMM", "operator_name": "A1"})
    )
    assert row["plmno_code"] == "AUTMM"
    assert isinstance(fake_state.added[0], OperatorInfo)
    # Client supplied ids are ignored, the database assigns one
    assert fake_state.added[0].id == 1


def test_insert_rejects_unknown_columns(fake_state):
    service = ReferenceService(FakeSession(fake_state))
    with pytest.raises(ConfigurationError):
        asyncio.run(service.insert_row("operator-info", {"plmno": "AUTMM"}))


def test_read_only_tables_reject_writes(fake_state):
    service = ReferenceService(FakeSession(fake_state))
    with pytest.raises(ConfigurationError):
        asyncio.run(service.insert_row("tcps", {"tcp_name": "TCP6"}))
    with pytest.raises(ConfigurationError):
        asyncio.run(service.delete_row("iot-launches-and-steering", 1))


def test_update_changes_only_given_columns(fake_state):
    existing = OperatorInfo(id=5, plmno_code="AUTMM", operator_name="A1", country="Austria")
    fake_state.queue(FakeResult(scalar=existing))
    service = ReferenceService(FakeSession(fake_state))

    row = asyncio.run(service.update_row("operator-info", 5, {"operator_name": "A1 Telekom"}))

    assert row["operator_name"] == "A1 Telekom"
    assert row["country"] == "Austria"


def test_tcp_range_is_checked(fake_state):
    service = ReferenceService(FakeSession(fake_state))
    for tcp in (0, 6):
        with pytest.raises(InvalidTcpError):
            asyncio.run(service.bap_list(tcp))
        with pytest.raises(InvalidTcpError):
            asyncio.run(service.price_zone_list(tcp))
    assert fake_state.statements == []


def test_price_zone_report_reads_tcp_view(fake_state):
    service = ReferenceService(FakeSession(fake_state))
    asyncio.run(service.price_zone_list(3))
    assert "FROM cm_data.v_price_zone_list_tcp3_global" in fake_state.statements[0]


def test_bap_list_binds_tcp(fake_state):
    service = ReferenceService(FakeSession(fake_state))
    asyncio.run(service.bap_list(2))
    assert fake_state.params[0] == {"tcp": 2}
