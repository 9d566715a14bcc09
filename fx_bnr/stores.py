"""Currency configuration and observation log stores.

Both stores sit on top of a :class:`~fx_bnr.db.base_backend.BackendStrategy`
so the pipeline never talks to a database driver directly.
"""

from __future__ import annotations

import re
import threading
from datetime import date
from decimal import Decimal
from typing import Iterable

from fx_bnr.db.base_backend import BackendStrategy, PersistenceResult
from fx_bnr.errors import InvalidConfig
from fx_bnr.ingestion.models import Observation
from fx_bnr.utils.logger import get_logger

LOGGER = get_logger(__name__)

CURRENCY_CODE_PATTERN = re.compile(r"^[A-Z]{3}$")


def normalise_codes(codes: Iterable[object]) -> frozenset[str]:
    """Validate currency codes and return them as an upper-case set.

    Raises :class:`InvalidConfig` for anything that is not a three letter
    code once surrounding whitespace is stripped.
    """

    if codes is None or isinstance(codes, (str, bytes)):
        raise InvalidConfig("currencies must be a list of currency codes")
    normalised: set[str] = set()
    for code in codes:
        if not isinstance(code, str) or not code.strip():
            raise InvalidConfig(f"Empty or non-text currency code: {code!r}")
        candidate = code.strip().upper()
        if not CURRENCY_CODE_PATTERN.match(candidate):
            raise InvalidConfig(f"Malformed currency code: {code!r}")
        normalised.add(candidate)
    return frozenset(normalised)


class CurrencyConfigStore:
    """Holds the set of currencies the scheduled cycle keeps.

    The active set is cached in memory and mirrored to the backend, which is
    read once at construction so a restart keeps the last configuration.
    """

    def __init__(self, backend: BackendStrategy | None = None) -> None:
        self._backend = backend
        self._lock = threading.Lock()
        self._codes: frozenset[str] = frozenset(backend.load_currencies()) if backend else frozenset()

    def replace(self, codes: Iterable[str]) -> None:
        validated = normalise_codes(codes)
        with self._lock:
            if self._backend is not None:
                self._backend.replace_currencies(validated)
            self._codes = validated
        LOGGER.info("Currency configuration replaced: %s", ", ".join(sorted(validated)) or "<empty>")

    def current(self) -> frozenset[str]:
        return self._codes


class ObservationStore:
    """Append-only log of (currency, rate, date) observations."""

    def __init__(self, backend: BackendStrategy) -> None:
        self._backend = backend

    def append_batch(
        self, rate_date: date, pairs: Iterable[tuple[str, Decimal]]
    ) -> PersistenceResult:
        rows = [
            Observation(currency=currency, rate=rate, rate_date=rate_date)
            for currency, rate in pairs
        ]
        return self._backend.insert_observations(rows)

    def all_rows(self) -> list[Observation]:
        return self._backend.fetch_observations()


__all__ = ["CurrencyConfigStore", "ObservationStore", "normalise_codes"]
