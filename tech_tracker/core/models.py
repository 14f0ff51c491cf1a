"""Domain models and wire decoding for the Tech Tracker API.

Decoding is all-or-nothing: a single malformed record (or timestamp) fails
the whole response so that callers never apply a partial payload.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Sequence

from .. import constants
from .errors import DecodeError, TimestampFormatError

__all__ = [
    "HistoryPage",
    "PageMetadata",
    "Technician",
    "TechnicianHistoryEntry",
    "TechnicianUpdate",
    "decode_history_page",
    "decode_technicians",
    "encode_update_batch",
    "format_timestamp",
    "parse_timestamp",
]

_TIMESTAMP_RE = re.compile(constants.TIMESTAMP_PATTERN)


@dataclass(slots=True, frozen=True)
class Technician:
    """Current status snapshot for one technician, keyed by name."""

    name: str
    status: str
    time: datetime


@dataclass(slots=True, frozen=True)
class TechnicianUpdate:
    name: str
    status: str

    def as_dict(self) -> dict[str, str]:
        return {"name": self.name, "status": self.status}


@dataclass(slots=True, frozen=True)
class TechnicianHistoryEntry:
    """One past status change. Entries carry no stable identity."""

    name: str
    status: str
    time: datetime


@dataclass(slots=True, frozen=True)
class PageMetadata:
    current_page: int
    per_page: int
    total_pages: int
    total_count: int


@dataclass(slots=True, frozen=True)
class HistoryPage:
    entries: list[TechnicianHistoryEntry]
    meta: PageMetadata


def parse_timestamp(value: Any) -> datetime:
    """Parse a ``yyyy-MM-dd'T'HH:mm:ss.SSS'Z'`` timestamp into an aware UTC datetime.

    Raises:
        TimestampFormatError: If the value is not a string matching the
            pattern exactly (three fractional digits and a literal ``Z``).
    """

    if not isinstance(value, str) or not _TIMESTAMP_RE.fullmatch(value):
        raise TimestampFormatError(f"Invalid timestamp: {value!r}")

    try:
        parsed = datetime.strptime(value, constants.TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise TimestampFormatError(f"Invalid timestamp: {value!r}") from exc

    return parsed.replace(tzinfo=timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a datetime in the wire pattern. Naive values are taken as UTC."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def decode_technicians(payload: Any) -> list[Technician]:
    """Decode the technicians endpoint body, preserving server order."""

    if not isinstance(payload, list):
        raise DecodeError(
            f"Expected a list of technicians, got {type(payload).__name__}"
        )

    return [
        Technician(*_decode_status_record(item, index))
        for index, item in enumerate(payload)
    ]


def decode_history_page(payload: Any) -> HistoryPage:
    """Decode the ``{"data": [...], "meta": {...}}`` history envelope."""

    if not isinstance(payload, Mapping):
        raise DecodeError(
            f"Expected a history envelope, got {type(payload).__name__}"
        )

    try:
        data = payload["data"]
        meta = payload["meta"]
    except KeyError as exc:
        raise DecodeError(f"History response missing field: {exc.args[0]}") from exc

    if not isinstance(data, list):
        raise DecodeError("History field 'data' must be a list")

    entries = [
        TechnicianHistoryEntry(*_decode_status_record(item, index))
        for index, item in enumerate(data)
    ]
    return HistoryPage(entries=entries, meta=_decode_meta(meta))


def encode_update_batch(updates: Iterable[TechnicianUpdate]) -> dict[str, list[dict[str, str]]]:
    """Wrap updates in the ``{"technicians": [...]}`` envelope the API expects."""

    return {"technicians": [update.as_dict() for update in updates]}


def _decode_status_record(item: Any, index: int) -> tuple[str, str, datetime]:
    if not isinstance(item, Mapping):
        raise DecodeError(f"Record {index} is not an object")

    try:
        name = item["name"]
        status = item["status"]
        time_value = item["time"]
    except KeyError as exc:
        raise DecodeError(f"Record {index} missing field: {exc.args[0]}") from exc

    if not isinstance(name, str) or not isinstance(status, str):
        raise DecodeError(f"Record {index} has non-string name or status")

    return name, status, parse_timestamp(time_value)


_META_FIELDS: Sequence[str] = ("current_page", "per_page", "total_pages", "total_count")


def _decode_meta(meta: Any) -> PageMetadata:
    if not isinstance(meta, Mapping):
        raise DecodeError("History field 'meta' must be an object")

    values: dict[str, int] = {}
    for key in _META_FIELDS:
        if key not in meta:
            raise DecodeError(f"History metadata missing field: {key}")
        value = meta[key]
        # bool is an int subclass but never a valid count
        if isinstance(value, bool) or not isinstance(value, int):
            raise DecodeError(f"History metadata field {key!r} must be an integer")
        values[key] = value

    return PageMetadata(**values)
