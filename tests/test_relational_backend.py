"""Relational backend integration tests using SQLite."""

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from fx_bnr.db.relational_backend import RelationalBackend
from fx_bnr.errors import StorageWriteFailure
from fx_bnr.ingestion.models import Observation


def test_relational_backend_roundtrip(tmp_path: Path) -> None:
    backend = RelationalBackend(f"sqlite:///{tmp_path / 'relational.db'}")
    backend.ensure_schema()

    rows = [
        Observation("USD", Decimal("4.97"), date(2024, 1, 10)),
        Observation("EUR", Decimal("5.40"), date(2024, 1, 10)),
        Observation("USD", Decimal("4.99"), date(2024, 1, 11)),
    ]
    assert backend.insert_observations(rows[:2]).inserted == 2
    assert backend.insert_observations(rows[2:]).inserted == 1

    assert backend.fetch_observations() == rows

    backend.replace_currencies(["USD", "EUR", "USD"])
    assert backend.load_currencies() == {"USD", "EUR"}
    backend.replace_currencies([])
    assert backend.load_currencies() == set()

    backend.close()


def test_relational_backend_wraps_driver_errors(tmp_path: Path) -> None:
    backend = RelationalBackend(f"sqlite:///{tmp_path / 'no_schema.db'}")

    with pytest.raises(StorageWriteFailure):
        backend.insert_observations([Observation("USD", Decimal("4.97"), date(2024, 1, 10))])
    with pytest.raises(StorageWriteFailure):
        backend.fetch_observations()

    backend.close()
