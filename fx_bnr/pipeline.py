"""The ingestion cycle: fetch, filter by configuration, persist and export.

Two entry points share the same collaborators but apply different filtering:

* :meth:`IngestionPipeline.run_for_date` serves on-demand requests. It writes
  every currency the feed publishes, ignores the configuration, never exports
  and lets every failure reach the caller.
* :meth:`IngestionPipeline.run_scheduled` is the timer tick. It keeps only the
  configured currencies, exports the filtered snapshot and never raises: a
  failed tick is logged, counted in :class:`TickStats` and forgotten, so the
  next tick runs as if nothing happened.
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from fx_bnr.errors import DateMismatch, FxBnrError
from fx_bnr.export.sinks import BlobSink, write_scratch_file
from fx_bnr.ingestion.models import Snapshot
from fx_bnr.ingestion.strategy import RateSource
from fx_bnr.stores import CurrencyConfigStore, ObservationStore
from fx_bnr.utils.logger import get_logger

LOGGER = get_logger(__name__)

EXPORT_NAME = "currencies.json"


def serialize_snapshot(snapshot: Snapshot) -> bytes:
    """Encode a snapshot as compact JSON, e.g. ``{"USD":"4.97"}``."""

    return json.dumps(snapshot, separators=(",", ":")).encode("utf-8")


@dataclass(slots=True)
class TickOutcome:
    """What a single scheduled tick achieved."""

    succeeded: bool
    rate_date: date | None = None
    rows_written: int = 0
    file_id: str | None = None
    error: str | None = None


class TickStats:
    """Thread-safe counters describing the scheduled ticks so far."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.ticks = 0
        self.succeeded = 0
        self.failed = 0
        self.last_error: str | None = None
        self.last_success_at: datetime | None = None
        self.last_file_id: str | None = None

    def record(self, outcome: TickOutcome) -> None:
        with self._lock:
            self.ticks += 1
            if outcome.succeeded:
                self.succeeded += 1
                self.last_success_at = datetime.now(timezone.utc)
                self.last_file_id = outcome.file_id
            else:
                self.failed += 1
                self.last_error = outcome.error

    def as_dict(self) -> dict[str, Any]:
        with self._lock:
            return {
                "ticks": self.ticks,
                "succeeded": self.succeeded,
                "failed": self.failed,
                "last_error": self.last_error,
                "last_success_at": (
                    self.last_success_at.isoformat() if self.last_success_at else None
                ),
                "last_file_id": self.last_file_id,
            }


class IngestionPipeline:
    """Orchestrates one ingestion run against injected collaborators."""

    def __init__(
        self,
        source: RateSource,
        config_store: CurrencyConfigStore,
        observation_store: ObservationStore,
        sink: BlobSink,
        *,
        scratch_dir: str | Path = ".",
        export_name: str = EXPORT_NAME,
    ) -> None:
        self.source = source
        self.config_store = config_store
        self.observation_store = observation_store
        self.sink = sink
        self.scratch_dir = Path(scratch_dir)
        self.export_name = export_name
        self.stats = TickStats()

    def run_for_date(self, requested_date: date) -> Snapshot:
        """Fetch the feed, check it is for ``requested_date`` and store every rate."""

        feed = self.source.fetch()
        if feed.rate_date != requested_date:
            LOGGER.info(
                "Feed is for %s but %s was requested; nothing stored",
                feed.rate_date,
                requested_date,
            )
            raise DateMismatch()
        self.observation_store.append_batch(feed.rate_date, feed.rates)
        return feed.to_snapshot()

    def run_scheduled(self) -> TickOutcome:
        """Run one timer tick. Failures are logged and counted, never raised."""

        try:
            outcome = self._tick()
        except FxBnrError as exc:
            LOGGER.exception("Scheduled tick failed with %s: %s", type(exc).__name__, exc)
            outcome = TickOutcome(succeeded=False, error=f"{type(exc).__name__}: {exc}")
        except Exception as exc:
            LOGGER.exception("Scheduled tick crashed")
            outcome = TickOutcome(succeeded=False, error=f"{type(exc).__name__}: {exc}")
        self.stats.record(outcome)
        return outcome

    def _tick(self) -> TickOutcome:
        feed = self.source.fetch()
        configured = self.config_store.current()
        selected = [(currency, rate) for currency, rate in feed.rates if currency in configured]
        snapshot = feed.to_snapshot(configured)

        result = self.observation_store.append_batch(feed.rate_date, selected)

        payload = serialize_snapshot(snapshot)
        write_scratch_file(self.scratch_dir, self.export_name, payload)
        # overlapping ticks share the scratch file; upload this tick's own bytes
        file_id = self.sink.upload(self.export_name, payload)
        LOGGER.info(
            "Tick for %s stored %s rows and exported %s (file id %s)",
            feed.rate_date,
            result.inserted,
            self.export_name,
            file_id,
        )
        return TickOutcome(
            succeeded=True,
            rate_date=feed.rate_date,
            rows_written=result.inserted,
            file_id=file_id,
        )


__all__ = [
    "EXPORT_NAME",
    "IngestionPipeline",
    "TickOutcome",
    "TickStats",
    "serialize_snapshot",
]
