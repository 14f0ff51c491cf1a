"""Failure types raised by the API client and decoders."""

from __future__ import annotations

from typing import Optional


class TechTrackerError(RuntimeError):
    """Base class for failures of a single Tech Tracker request."""


class TransportError(TechTrackerError):
    """Raised when no response could be obtained from the API."""


class ProtocolError(TechTrackerError):
    """Raised when the API answers with a non-success status code."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class DecodeError(TechTrackerError):
    """Raised when a response body does not match the expected schema."""


class TimestampFormatError(DecodeError):
    """Raised when a timestamp does not match the wire pattern."""
