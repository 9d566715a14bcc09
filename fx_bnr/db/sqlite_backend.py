"""SQLite backend strategy implementation."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence

from fx_bnr.db import DEFAULT_SQLITE_DB_PATH
from fx_bnr.db.base_backend import BackendStrategy, PersistenceResult
from fx_bnr.db.sqlite_manager import SQLiteManager
from fx_bnr.ingestion.models import Observation


class SQLiteBackend(BackendStrategy):
    """Backend strategy that stores observations in a local SQLite file."""

    def __init__(
        self,
        db_path: str | Path = DEFAULT_SQLITE_DB_PATH,
        *,
        manager: SQLiteManager | None = None,
    ) -> None:
        self.manager = manager or SQLiteManager(db_path)
        self.db_path = Path(self.manager.db_path)

    def ensure_schema(self) -> None:
        # ``SQLiteManager`` creates the schema in its constructor.
        return None

    def insert_observations(self, rows: Sequence[Observation]) -> PersistenceResult:
        return self.manager.insert_observations(rows)

    def fetch_observations(self) -> list[Observation]:
        return self.manager.fetch_observations()

    def replace_currencies(self, codes: Iterable[str]) -> None:
        self.manager.replace_currencies(codes)

    def load_currencies(self) -> set[str]:
        return self.manager.load_currencies()

    def close(self) -> None:  # pragma: no cover - trivial delegator
        self.manager.close()


__all__ = ["SQLiteBackend"]
