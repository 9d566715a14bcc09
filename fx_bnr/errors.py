"""Exception hierarchy for fx_bnr.

Every error carries the HTTP status the API layer answers with when the
error escapes an on-demand request.
"""

from __future__ import annotations


class FxBnrError(Exception):
    """Base exception for all fx_bnr failures."""

    status_code: int = 500


class UpstreamUnavailable(FxBnrError):
    """Raised when the rate feed cannot be reached or answers with an HTTP error."""

    status_code = 502


class MalformedFeed(FxBnrError):
    """Raised when the feed document lacks the expected nodes or attributes."""

    status_code = 502


class DateMismatch(FxBnrError):
    """Raised when the feed reports a different date than the one requested."""

    status_code = 400

    def __init__(self, message: str = "No data available for this date") -> None:
        super().__init__(message)


class InvalidConfig(FxBnrError):
    """Raised for empty or malformed currency codes."""

    status_code = 400


class SinkUnavailable(FxBnrError):
    """Raised when a snapshot cannot be shipped to the blob sink."""

    status_code = 502


class StorageWriteFailure(FxBnrError):
    """Raised when the persistence backend rejects a read or write."""

    status_code = 500


__all__ = [
    "FxBnrError",
    "UpstreamUnavailable",
    "MalformedFeed",
    "DateMismatch",
    "InvalidConfig",
    "SinkUnavailable",
    "StorageWriteFailure",
]
