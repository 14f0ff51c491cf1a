"""Tests for wire decoding and encoding of Tech Tracker records."""

import json
from datetime import datetime, timezone

import pytest

from tech_tracker.core import (
    DecodeError,
    PageMetadata,
    Technician,
    TechnicianUpdate,
    TimestampFormatError,
    decode_history_page,
    decode_technicians,
    encode_update_batch,
    format_timestamp,
    parse_timestamp,
)


def test_parse_timestamp_returns_utc_with_milliseconds() -> None:
    parsed = parse_timestamp("2024-04-06T10:15:30.123Z")

    assert parsed == datetime(2024, 4, 6, 10, 15, 30, 123000, tzinfo=timezone.utc)
    assert parsed.tzinfo is timezone.utc


@pytest.mark.parametrize(
    "value",
    [
        "2024-04-06T10:00:00Z",  # no milliseconds
        "2024-04-06T10:00:00.12Z",
        "2024-04-06T10:00:00.123456Z",
        "2024-04-06T10:00:00.123",
        "2024-04-06T10:00:00.123+00:00",
        "\u0662\u0660\u0662\u0664-04-06T10:00:00.000Z",  # Arabic-Indic digits
        "2024-04-06T10:00:00.\uff11\uff12\uff13Z",  # fullwidth digits
        "2024-04-06 10:00:00.123Z",
        "2024-13-06T10:00:00.123Z",
        "2024-02-30T10:00:00.123Z",
        "",
        1712397600,
        None,
    ],
)
def test_parse_timestamp_rejects_other_formats(value) -> None:
    with pytest.raises(TimestampFormatError):
        parse_timestamp(value)


def test_timestamp_format_error_is_a_decode_error() -> None:
    assert issubclass(TimestampFormatError, DecodeError)


def test_format_timestamp_truncates_to_milliseconds() -> None:
    value = datetime(2024, 4, 6, 10, 15, 30, 123987, tzinfo=timezone.utc)

    assert format_timestamp(value) == "2024-04-06T10:15:30.123Z"
    assert parse_timestamp(format_timestamp(value)) == value.replace(microsecond=123000)


def test_decode_technicians_preserves_server_order() -> None:
    payload = [
        {"name": "Zed", "status": "Out today", "time": "2024-04-06T07:00:00.000Z"},
        {"name": "Alice", "status": "At desk", "time": "2024-04-06T08:00:00.001Z"},
        {"name": "Mia", "status": "At lunch", "time": "2024-04-06T12:30:00.999Z"},
    ]

    technicians = decode_technicians(payload)

    assert [tech.name for tech in technicians] == ["Zed", "Alice", "Mia"]
    assert technicians[1] == Technician(
        name="Alice",
        status="At desk",
        time=datetime(2024, 4, 6, 8, 0, 0, 1000, tzinfo=timezone.utc),
    )


def test_decode_technicians_ignores_unknown_fields() -> None:
    payload = [
        {"id": 7, "name": "Alice", "status": "At desk", "time": "2024-04-06T08:00:00.000Z"}
    ]

    assert decode_technicians(payload)[0].name == "Alice"


def test_decode_technicians_fails_whole_response_on_bad_timestamp() -> None:
    payload = [
        {"name": "B", "status": "At desk", "time": "2024-04-06T09:00:00.000Z"},
        {"name": "A", "status": "Away", "time": "2024-04-06T10:00:00Z"},
    ]

    with pytest.raises(TimestampFormatError):
        decode_technicians(payload)


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "A", "status": "Away", "time": "2024-04-06T10:00:00.000Z"},
        [{"name": "A", "time": "2024-04-06T10:00:00.000Z"}],
        [{"name": 5, "status": "Away", "time": "2024-04-06T10:00:00.000Z"}],
        ["A"],
    ],
)
def test_decode_technicians_rejects_schema_mismatch(payload) -> None:
    with pytest.raises(DecodeError):
        decode_technicians(payload)


def test_decode_history_page_reads_entries_and_meta() -> None:
    payload = {
        "data": [
            {"name": "Bob", "status": "At lunch", "time": "2024-04-06T12:00:00.000Z"},
            {"name": "Bob", "status": "At desk", "time": "2024-04-06T09:00:00.000Z"},
        ],
        "meta": {"current_page": 3, "per_page": 2, "total_pages": 7, "total_count": 13},
    }

    page = decode_history_page(payload)

    assert [entry.status for entry in page.entries] == ["At lunch", "At desk"]
    assert page.meta == PageMetadata(
        current_page=3, per_page=2, total_pages=7, total_count=13
    )


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"data": []},
        {"meta": {"current_page": 1, "per_page": 2, "total_pages": 1, "total_count": 0}},
        {"data": {}, "meta": {"current_page": 1, "per_page": 2, "total_pages": 1, "total_count": 0}},
        {"data": [], "meta": {"current_page": 1, "per_page": 2, "total_pages": 1}},
        {"data": [], "meta": {"current_page": "1", "per_page": 2, "total_pages": 1, "total_count": 0}},
        {"data": [], "meta": {"current_page": True, "per_page": 2, "total_pages": 1, "total_count": 0}},
        {
            "data": [{"name": "A", "status": "Away", "time": "2024-04-06T10:00:00Z"}],
            "meta": {"current_page": 1, "per_page": 2, "total_pages": 1, "total_count": 1},
        },
    ],
)
def test_decode_history_page_rejects_malformed_envelope(payload) -> None:
    with pytest.raises(DecodeError):
        decode_history_page(payload)


def test_encode_update_batch_wraps_single_update_in_envelope() -> None:
    body = encode_update_batch([TechnicianUpdate(name="Bob", status="At lunch")])

    assert json.dumps(body, separators=(",", ":")) == (
        '{"technicians":[{"name":"Bob","status":"At lunch"}]}'
    )
