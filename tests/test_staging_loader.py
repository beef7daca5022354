"""
Unit tests for the staging loader: decoding, header boundary, blank rows
and the single-transaction replace of a staging table.
"""

import asyncio
import io
from datetime import date, datetime

import pytest
from openpyxl import Workbook

from app.errors import EmptyUploadError, HeaderMismatchError, PersistenceError, ValidationError
from app.services.staging_loader import (
    ENCODING_CSV,
    ENCODING_XLSX,
    StagingLoader,
    cell_to_text,
    check_headers,
    decode_rows,
    extract_data_rows,
    fit_row,
)
from tests.fakes import FakeResult, staging_column_rows

pytestmark = pytest.mark.unit

STAGING = "cm_temp.t_tele2_voice_updated_temp"


def make_workbook(rows) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def test_decode_csv_strips_bom():
    rows = decode_rows("\ufefftadig,country\nAUTMM,Austria\n".encode("utf-8"), ENCODING_CSV)
    assert rows == [["tadig", "country"], ["AUTMM", "Austria"]]


def test_decode_xlsx_reads_first_sheet():
    payload = make_workbook([["tadig", "voice_mo"], ["AUTMM", 0.12]])
    rows = decode_rows(payload, ENCODING_XLSX)
    assert rows[0] == ["tadig", "voice_mo"]
    assert rows[1] == ["AUTMM", 0.12]


def test_decode_rejects_garbage_workbook():
    with pytest.raises(ValidationError):
        decode_rows(b"not a zip file", ENCODING_XLSX)


def test_decode_rejects_unknown_encoding():
    with pytest.raises(ValidationError):
        decode_rows(b"a,b", "json")


def test_extract_data_rows_skips_header_block_and_blank_rows():
    rows = [
        ["Price list"],
        ["generated 2024-01-01"],
        ["tadig", "country"],
        ["AUTMM", "Austria"],
        [None, "  "],
        ["BELMO", "Belgium"],
    ]
    assert extract_data_rows(rows, header_row_index=2) == [
        ["AUTMM", "Austria"],
        ["BELMO", "Belgium"],
    ]


def test_extract_data_rows_header_index_zero():
    rows = [["tadig"], ["AUTMM"]]
    assert extract_data_rows(rows, header_row_index=0) == [["AUTMM"]]


def test_extract_data_rows_nothing_after_header():
    with pytest.raises(EmptyUploadError):
        extract_data_rows([["title"], ["tadig"]], header_row_index=1)


def test_extract_data_rows_only_blank_rows():
    with pytest.raises(EmptyUploadError):
        extract_data_rows([["tadig"], ["", None], [None]], header_row_index=0)


def test_cell_to_text():
    assert cell_to_text(None) is None
    assert cell_to_text("   ") is None
    assert cell_to_text("AUTMM") == "AUTMM"
    assert cell_to_text(3) == "3"
    assert cell_to_text(True) == "true"
    assert cell_to_text(date(2024, 5, 1)) == "2024-05-01"
    assert cell_to_text(datetime(2024, 5, 1, 10, 30)) == "2024-05-01 10:30:00"


def test_fit_row_pads_and_truncates():
    assert fit_row(["a"], 3) == ["a", None, None]
    assert fit_row(["a", "b", "c", "d"], 2) == ["a", "b"]


def test_check_headers_ignores_case_spaces_and_underscores():
    check_headers(["TADIG", "Voice MO"], ["tadig", "voice_mo"])
    with pytest.raises(HeaderMismatchError):
        check_headers(["tadig", "country"], ["tadig", "voice_mo"])


def test_load_replaces_staging_contents_in_one_transaction(session_factory, fake_state):
    fake_state.queue(FakeResult(staging_column_rows("tadig", "country", "operator", "voice_mo", "voice_mt")))
    payload = b"Voice prices\ntadig,country,operator,voice_mo,voice_mt\nAUTMM,Austria,A1,0.1,0.05\n,,,,\nBELMO,Belgium,Proximus,0.2\n"

    loader = StagingLoader(session_factory, validate_headers=False)
    count = asyncio.run(loader.load(payload, ENCODING_CSV, STAGING, header_row_index=1))

    assert count == 2
    assert fake_state.log[0] == "BEGIN"
    assert fake_state.log[-1] == "COMMIT"
    assert "pg_attribute" in fake_state.statements[0]
    assert fake_state.statements[1] == 'TRUNCATE TABLE "cm_temp"."t_tele2_voice_updated_temp"'
    assert fake_state.statements[2].startswith(
        'INSERT INTO "cm_temp"."t_tele2_voice_updated_temp" ("tadig", "country", "operator", "voice_mo", "voice_mt")'
    )
    inserted = fake_state.params[2]
    assert inserted[0] == {"p0": "AUTMM", "p1": "Austria", "p2": "A1", "p3": "0.1", "p4": "0.05"}
    # Short rows are padded with NULL
    assert inserted[1] == {"p0": "BELMO", "p1": "Belgium", "p2": "Proximus", "p3": "0.2", "p4": None}


def test_load_empty_upload_still_truncates(session_factory, fake_state):
    loader = StagingLoader(session_factory, validate_headers=False)

    with pytest.raises(EmptyUploadError):
        asyncio.run(loader.load(b"title\ntadig\n\n", ENCODING_CSV, STAGING, header_row_index=1))

    assert fake_state.statements == ['TRUNCATE TABLE "cm_temp"."t_tele2_voice_updated_temp"']
    assert fake_state.log[-1] == "COMMIT"


def test_load_with_header_validation(session_factory, fake_state):
    fake_state.queue(FakeResult(staging_column_rows("tadig", "voice_mo")))
    loader = StagingLoader(session_factory, validate_headers=True)

    with pytest.raises(HeaderMismatchError):
        asyncio.run(loader.load(b"tadig,voice_mt\nAUTMM,0.1\n", ENCODING_CSV, STAGING, header_row_index=0))

    # Rejected before anything was truncated
    assert not any(sql.startswith("TRUNCATE") for sql in fake_state.statements)
    assert fake_state.log[-1] == "ROLLBACK"


def test_load_store_failure_rolls_back(session_factory, fake_state):
    fake_state.queue(FakeResult(staging_column_rows("tadig")))
    fake_state.fail_on = "INSERT INTO"
    loader = StagingLoader(session_factory, validate_headers=False)

    with pytest.raises(PersistenceError):
        asyncio.run(loader.load(b"tadig\nAUTMM\n", ENCODING_CSV, STAGING, header_row_index=0))

    assert fake_state.log[-1] == "ROLLBACK"


def test_load_rejects_negative_header_index(session_factory):
    loader = StagingLoader(session_factory)
    with pytest.raises(ValidationError):
        asyncio.run(loader.load(b"tadig\nAUTMM\n", ENCODING_CSV, STAGING, header_row_index=-1))


def test_load_xlsx(session_factory, fake_state):
    fake_state.queue(FakeResult(staging_column_rows("tadig", "voice_mo")))
    payload = make_workbook([["tadig", "voice_mo"], ["AUTMM", 0.5], [None, None], ["BELMO", 1]])

    loader = StagingLoader(session_factory, validate_headers=True)
    count = asyncio.run(loader.load(payload, ENCODING_XLSX, STAGING, header_row_index=0))

    assert count == 2
    assert fake_state.params[2] == [{"p0": "AUTMM", "p1": "0.5"}, {"p0": "BELMO", "p1": "1"}]
