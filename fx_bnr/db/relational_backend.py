"""Shared logic for SQL (Postgres/MySQL) backends."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Sequence

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from fx_bnr.db.base_backend import BackendStrategy, PersistenceResult
from fx_bnr.errors import StorageWriteFailure
from fx_bnr.ingestion.models import Observation
from fx_bnr.utils.dates import normalise_date
from fx_bnr.utils.logger import get_logger

LOGGER = get_logger(__name__)

_ID_COLUMNS = {
    "postgresql": "id BIGSERIAL PRIMARY KEY",
    "mysql": "id BIGINT AUTO_INCREMENT PRIMARY KEY",
    "sqlite": "id INTEGER PRIMARY KEY AUTOINCREMENT",
}

SCHEMA_SQL_VALUES = """
CREATE TABLE IF NOT EXISTS currency_values (
    {id_column},
    currency VARCHAR(3) NOT NULL,
    rate VARCHAR(32) NOT NULL,
    rate_date DATE NOT NULL,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""

SCHEMA_SQL_CONFIGS = """
CREATE TABLE IF NOT EXISTS currency_configs (
    currency VARCHAR(3) NOT NULL PRIMARY KEY
);
"""

INSERT_VALUE_SQL = """
INSERT INTO currency_values(currency, rate, rate_date)
VALUES(:currency, :rate, :rate_date)
"""
SELECT_VALUES_SQL = "SELECT currency, rate, rate_date FROM currency_values ORDER BY id"
DELETE_CONFIGS_SQL = "DELETE FROM currency_configs"
INSERT_CONFIG_SQL = "INSERT INTO currency_configs(currency) VALUES(:currency)"
SELECT_CONFIGS_SQL = "SELECT currency FROM currency_configs"


class RelationalBackend(BackendStrategy):
    """Backend for any SQLAlchemy URL, used for Postgres and MySQL servers."""

    def __init__(self, url: str) -> None:
        self.url = url
        self._engine_instance: Engine | None = None

    def _get_engine(self) -> Engine:
        if self._engine_instance is None:
            self._engine_instance = create_engine(self.url, future=True, pool_pre_ping=True)
        return self._engine_instance

    def ensure_schema(self) -> None:
        engine = self._get_engine()
        id_column = _ID_COLUMNS.get(engine.dialect.name, _ID_COLUMNS["postgresql"])
        try:
            with engine.begin() as connection:
                LOGGER.info("Ensuring currency tables exist on %s", engine.dialect.name)
                connection.execute(text("SELECT 1"))
                connection.execute(text(SCHEMA_SQL_VALUES.format(id_column=id_column)))
                connection.execute(text(SCHEMA_SQL_CONFIGS))
        except SQLAlchemyError as exc:
            raise StorageWriteFailure(f"Failed to ensure relational schema: {exc}") from exc

    def insert_observations(self, rows: Sequence[Observation]) -> PersistenceResult:
        result = PersistenceResult()
        if not rows:
            return result
        try:
            with self._get_engine().begin() as connection:
                for row in rows:
                    connection.execute(
                        text(INSERT_VALUE_SQL),
                        {
                            "currency": row.currency,
                            "rate": str(row.rate),
                            "rate_date": row.rate_date,
                        },
                    )
                    result.inserted += 1
        except SQLAlchemyError as exc:
            raise StorageWriteFailure(f"Failed to append observations: {exc}") from exc
        return result

    def fetch_observations(self) -> list[Observation]:
        try:
            with self._get_engine().connect() as connection:
                return [
                    Observation(
                        currency=row._mapping["currency"],
                        rate=Decimal(str(row._mapping["rate"])),
                        rate_date=normalise_date(row._mapping["rate_date"]),
                    )
                    for row in connection.execute(text(SELECT_VALUES_SQL))
                ]
        except SQLAlchemyError as exc:
            raise StorageWriteFailure(f"Failed to read observations: {exc}") from exc

    def replace_currencies(self, codes: Iterable[str]) -> None:
        try:
            with self._get_engine().begin() as connection:
                connection.execute(text(DELETE_CONFIGS_SQL))
                for code in sorted(set(codes)):
                    connection.execute(text(INSERT_CONFIG_SQL), {"currency": code})
        except SQLAlchemyError as exc:
            raise StorageWriteFailure(f"Failed to store currency configuration: {exc}") from exc

    def load_currencies(self) -> set[str]:
        try:
            with self._get_engine().connect() as connection:
                return {row[0] for row in connection.execute(text(SELECT_CONFIGS_SQL))}
        except SQLAlchemyError as exc:
            raise StorageWriteFailure(f"Failed to load currency configuration: {exc}") from exc

    def close(self) -> None:  # pragma: no cover - trivial resource cleanup
        if self._engine_instance is not None:
            self._engine_instance.dispose()


__all__ = ["RelationalBackend"]
