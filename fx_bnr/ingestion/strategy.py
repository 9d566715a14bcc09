"""Abstractions for pluggable rate sources."""

from __future__ import annotations

from typing import Protocol

from fx_bnr.ingestion.models import FeedSnapshot


class RateSource(Protocol):
    """Contract for fetching the current reference rates.

    Implementations raise :class:`~fx_bnr.errors.UpstreamUnavailable` when the
    feed cannot be reached and :class:`~fx_bnr.errors.MalformedFeed` when the
    document cannot be decoded. They never retry.
    """

    def fetch(self) -> FeedSnapshot:
        ...  # pragma: no cover - protocol definition


__all__ = ["RateSource"]
