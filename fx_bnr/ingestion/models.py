"""Data models shared across ingestion, persistence and export."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict

# currency code -> rate text, for a single date
Snapshot = Dict[str, str]


@dataclass(frozen=True, slots=True)
class Observation:
    """One persisted (currency, rate, date) fact."""

    currency: str
    rate: Decimal
    rate_date: date

    def as_dict(self) -> dict[str, str]:
        return {
            "currency": self.currency,
            "rate": str(self.rate),
            "date": self.rate_date.isoformat(),
        }


@dataclass(slots=True)
class FeedSnapshot:
    """The decoded feed: one reference date and the rates published for it.

    ``multipliers`` records the BNR ``multiplier`` attribute (e.g. ``HUF`` is
    quoted per 100 units). Rates are kept as published and never rescaled.
    """

    rate_date: date
    rates: list[tuple[str, Decimal]]
    multipliers: dict[str, int] = field(default_factory=dict)

    @property
    def currencies(self) -> list[str]:
        return [currency for currency, _ in self.rates]

    def to_snapshot(self, only: frozenset[str] | set[str] | None = None) -> Snapshot:
        """Return ``currency -> rate text`` restricted to ``only`` when given."""

        return {
            currency: str(rate)
            for currency, rate in self.rates
            if only is None or currency in only
        }


__all__ = ["Observation", "FeedSnapshot", "Snapshot"]
