"""SQLite persistence for fx_bnr built on the SQLAlchemy ORM."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Sequence, cast

from sqlalchemy import Column, Date, DateTime, Integer, String, create_engine, delete, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from fx_bnr.db import DEFAULT_SQLITE_DB_PATH
from fx_bnr.db.base_backend import PersistenceResult
from fx_bnr.errors import StorageWriteFailure
from fx_bnr.ingestion.models import Observation
from fx_bnr.utils.logger import get_logger

LOGGER = get_logger(__name__)


class Base(DeclarativeBase):
    pass


class _CurrencyValue(Base):
    __tablename__ = "currency_values"

    id = Column(Integer, primary_key=True, autoincrement=True)
    currency = Column(String(3), nullable=False)
    # decimal text exactly as published by the feed
    rate = Column(String, nullable=False)
    rate_date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime, server_default=text("CURRENT_TIMESTAMP"))


class _CurrencyConfig(Base):
    __tablename__ = "currency_configs"

    currency = Column(String(3), primary_key=True)


class SQLiteManager:
    """Owns the SQLite engine plus the observation and configuration tables."""

    def __init__(self, db_path: str | Path = DEFAULT_SQLITE_DB_PATH) -> None:
        self.db_path = Path(db_path).expanduser().resolve()
        self.engine: Engine = create_engine(
            f"sqlite:///{self.db_path}",
            echo=False,
            future=True,
            # the scheduler thread and request threads share the engine
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        Base.metadata.create_all(self.engine)
        self._SessionFactory: sessionmaker[Session] = sessionmaker(
            bind=self.engine, expire_on_commit=False, future=True
        )
        LOGGER.info("Using SQLite database at %s", self.db_path)

    def insert_observations(self, rows: Sequence[Observation]) -> PersistenceResult:
        result = PersistenceResult()
        if not rows:
            return result
        try:
            with self._SessionFactory() as session:
                for row in rows:
                    session.add(
                        _CurrencyValue(
                            currency=row.currency,
                            rate=str(row.rate),
                            rate_date=row.rate_date,
                        )
                    )
                    result.inserted += 1
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageWriteFailure(f"Failed to append observations: {exc}") from exc
        LOGGER.info("Appended %s observation rows", result.inserted)
        return result

    def fetch_observations(self) -> list[Observation]:
        try:
            with self._SessionFactory() as session:
                stmt = select(_CurrencyValue).order_by(_CurrencyValue.id)
                return [
                    Observation(
                        currency=cast(str, model.currency),
                        rate=Decimal(cast(str, model.rate)),
                        rate_date=cast(date, model.rate_date),
                    )
                    for model in session.execute(stmt).scalars()
                ]
        except SQLAlchemyError as exc:
            raise StorageWriteFailure(f"Failed to read observations: {exc}") from exc

    def replace_currencies(self, codes: Iterable[str]) -> None:
        try:
            with self._SessionFactory() as session:
                session.execute(delete(_CurrencyConfig))
                session.add_all(_CurrencyConfig(currency=code) for code in sorted(set(codes)))
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageWriteFailure(f"Failed to store currency configuration: {exc}") from exc

    def load_currencies(self) -> set[str]:
        try:
            with self._SessionFactory() as session:
                return {
                    cast(str, code)
                    for code in session.execute(select(_CurrencyConfig.currency)).scalars()
                }
        except SQLAlchemyError as exc:
            raise StorageWriteFailure(f"Failed to load currency configuration: {exc}") from exc

    def close(self) -> None:  # pragma: no cover - trivial
        self.engine.dispose()

    def __enter__(self) -> "SQLiteManager":  # pragma: no cover - trivial
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - trivial
        self.close()


__all__ = ["SQLiteManager", "PersistenceResult"]
