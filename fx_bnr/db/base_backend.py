"""Backend strategy interfaces for fx_bnr."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Sequence

from fx_bnr.ingestion.models import Observation


@dataclass(slots=True)
class PersistenceResult:
    """Represents how many observation rows a batch appended."""

    inserted: int = 0

    @property
    def total(self) -> int:
        return self.inserted


class BackendStrategy(ABC):
    """Common interface implemented by every database backend.

    Observations form an append-only log: backends never update or delete
    them and must return them in insertion order. The currency configuration
    is a single set that :meth:`replace_currencies` overwrites.
    """

    @abstractmethod
    def ensure_schema(self) -> None:
        """Create required tables/collections and verify connectivity."""

    @abstractmethod
    def insert_observations(self, rows: Sequence[Observation]) -> PersistenceResult:
        """Append observation rows."""

    @abstractmethod
    def fetch_observations(self) -> list[Observation]:
        """Return every stored observation in insertion order."""

    @abstractmethod
    def replace_currencies(self, codes: Iterable[str]) -> None:
        """Discard the stored configuration and store ``codes`` instead."""

    @abstractmethod
    def load_currencies(self) -> set[str]:
        """Return the stored configuration (empty when never configured)."""

    def close(self) -> None:  # pragma: no cover - optional cleanup hook
        """Backends may override to release connections/resources."""


__all__ = ["BackendStrategy", "PersistenceResult"]
