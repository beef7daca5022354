"""
Unit tests for the version registry queries.
"""

import asyncio
from datetime import date

import pytest

from app.models.etl_conf import DatasetVersion
from app.repositories.version_repository import VersionRepository
from tests.fakes import FakeResult, FakeSession

pytestmark = pytest.mark.unit

VERSIONS = "cm_conf.t_data_imsi_donor_versions"


def test_resolve_picks_newest_version_with_label(fake_state):
    fake_state.queue(FakeResult(scalar=21))
    repo = VersionRepository(FakeSession(fake_state))

    assert asyncio.run(repo.resolve_version_id("Jan", 3)) == 21

    sql = fake_state.statements[0]
    assert f"WHERE {VERSIONS}.etl_conf_id = " in sql
    assert f"{VERSIONS}.version_name = " in sql
    assert f"ORDER BY {VERSIONS}.id DESC" in sql
    assert "LIMIT" in sql


def test_resolve_unknown_label(fake_state):
    repo = VersionRepository(FakeSession(fake_state))
    assert asyncio.run(repo.resolve_version_id("Feb", 3)) is None


def test_display_label(fake_state):
    fake_state.queue(
        FakeResult(scalar=DatasetVersion(id=5, etl_conf_id=3, version_name="Jan", version_date=date(2024, 1, 31)))
    )
    repo = VersionRepository(FakeSession(fake_state))

    assert asyncio.run(repo.get_display_label(5)) == "Jan ( 2024-01-31 )"
    assert f"WHERE {VERSIONS}.id = " in fake_state.statements[0]


def test_display_label_of_unknown_version(fake_state):
    repo = VersionRepository(FakeSession(fake_state))
    assert asyncio.run(repo.get_display_label(404)) is None
