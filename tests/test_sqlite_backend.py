from __future__ import annotations

from datetime import date
from decimal import Decimal

from fx_bnr.db.sqlite_backend import SQLiteBackend
from fx_bnr.ingestion.models import Observation


def test_sqlite_backend_roundtrip(tmp_path) -> None:
    backend = SQLiteBackend(db_path=tmp_path / "sqlite_backend.db")
    assert backend.ensure_schema() is None

    rows = [
        Observation("USD", Decimal("4.9712"), date(2024, 1, 10)),
        Observation("EUR", Decimal("5.4012"), date(2024, 1, 10)),
    ]
    result = backend.insert_observations(rows)
    assert result.inserted == 2

    fetched = backend.fetch_observations()
    assert fetched == rows

    backend.close()


def test_sqlite_backend_configuration_roundtrip(tmp_path) -> None:
    backend = SQLiteBackend(db_path=tmp_path / "sqlite_config.db")
    assert backend.load_currencies() == set()

    backend.replace_currencies(["USD", "EUR"])
    backend.replace_currencies(["GBP"])

    assert backend.load_currencies() == {"GBP"}
    assert backend.db_path == (tmp_path / "sqlite_config.db").resolve()
    backend.close()


def test_sqlite_backend_keeps_data_across_instances(tmp_path) -> None:
    db_path = tmp_path / "persist.db"
    first = SQLiteBackend(db_path=db_path)
    first.insert_observations([Observation("USD", Decimal("4.97"), date(2024, 1, 10))])
    first.replace_currencies(["USD"])
    first.close()

    second = SQLiteBackend(db_path=db_path)
    assert [row.currency for row in second.fetch_observations()] == ["USD"]
    assert second.load_currencies() == {"USD"}
    second.close()
