"""Core primitives for tech-tracker."""

from .errors import (
    DecodeError,
    ProtocolError,
    TechTrackerError,
    TimestampFormatError,
    TransportError,
)
from .models import (
    HistoryPage,
    PageMetadata,
    Technician,
    TechnicianHistoryEntry,
    TechnicianUpdate,
    decode_history_page,
    decode_technicians,
    encode_update_batch,
    format_timestamp,
    parse_timestamp,
)
from .protocols import StateListener, TechnicianApi

__all__ = [
    "DecodeError",
    "HistoryPage",
    "PageMetadata",
    "ProtocolError",
    "StateListener",
    "Technician",
    "TechnicianApi",
    "TechnicianHistoryEntry",
    "TechnicianUpdate",
    "TechTrackerError",
    "TimestampFormatError",
    "TransportError",
    "decode_history_page",
    "decode_technicians",
    "encode_update_batch",
    "format_timestamp",
    "parse_timestamp",
]
