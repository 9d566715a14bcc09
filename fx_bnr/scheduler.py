"""Fixed-interval timer that drives the scheduled ingestion tick."""

from __future__ import annotations

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from fx_bnr.pipeline import IngestionPipeline
from fx_bnr.utils.logger import get_logger

LOGGER = get_logger(__name__)

JOB_ID = "scheduled_ingest"
DEFAULT_TICK_SECONDS = 60


class TickScheduler:
    """Run :meth:`IngestionPipeline.run_scheduled` every ``interval_seconds``.

    Ticks execute on the scheduler's worker threads, so a slow fetch or upload
    never delays the timer. A tick that overruns the interval does not stop
    the next one from starting.
    """

    def __init__(
        self,
        pipeline: IngestionPipeline,
        *,
        interval_seconds: float = DEFAULT_TICK_SECONDS,
        scheduler: BackgroundScheduler | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.pipeline = pipeline
        self.interval_seconds = interval_seconds
        self.scheduler = scheduler or BackgroundScheduler(daemon=True)

    @property
    def running(self) -> bool:
        return bool(self.scheduler.running)

    def start(self) -> None:
        if self.running:
            return
        self.scheduler.add_job(
            self.pipeline.run_scheduled,
            IntervalTrigger(seconds=self.interval_seconds),
            id=JOB_ID,
            name="currency snapshot ingest",
            replace_existing=True,
            coalesce=False,
            max_instances=2,
        )
        self.scheduler.start()
        LOGGER.info("Scheduler started (interval: %ss)", self.interval_seconds)

    def shutdown(self) -> None:
        if self.running:
            # in-flight ticks are abandoned, not cancelled
            self.scheduler.shutdown(wait=False)
            LOGGER.info("Scheduler shut down")


__all__ = ["DEFAULT_TICK_SECONDS", "JOB_ID", "TickScheduler"]
