"""Shared fakes for the fx_bnr test-suite."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Callable

import pytest

from fx_bnr import FxBnr
from fx_bnr.errors import SinkUnavailable
from fx_bnr.ingestion.models import FeedSnapshot
from fx_bnr.settings import Settings


class FakeSource:
    def __init__(self, feed: FeedSnapshot | None = None, error: Exception | None = None) -> None:
        self.feed = feed
        self.error = error
        self.calls = 0

    def fetch(self) -> FeedSnapshot:
        self.calls += 1
        if self.error is not None:
            raise self.error
        assert self.feed is not None
        return self.feed


class RecordingSink:
    def __init__(self, failures: int = 0) -> None:
        self.failures = failures
        self.uploads: list[tuple[str, bytes]] = []

    def upload(self, name: str, content: bytes) -> str:
        if self.failures:
            self.failures -= 1
            raise SinkUnavailable("quota exceeded")
        self.uploads.append((name, content))
        return f"file-{len(self.uploads)}"


def _make_feed(rate_date: str, rates: dict[str, str]) -> FeedSnapshot:
    return FeedSnapshot(
        rate_date=date.fromisoformat(rate_date),
        rates=[(currency, Decimal(value)) for currency, value in rates.items()],
    )


@pytest.fixture
def make_feed() -> Callable[[str, dict[str, str]], FeedSnapshot]:
    return _make_feed


@pytest.fixture
def fake_source(make_feed) -> FakeSource:
    return FakeSource(
        make_feed("2024-01-10", {"USD": "4.97", "EUR": "5.40", "GBP": "6.29", "JPY": "3.44"})
    )


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    settings = Settings()
    settings.scratch_dir = tmp_path / "scratch"
    settings.export_dir = tmp_path / "exports"
    settings.export_bucket = None
    settings.jwt_secret = "test-secret"
    settings.admin_username = "test"
    settings.admin_password = "test"
    return settings


@pytest.fixture
def fx(tmp_path: Path, fake_source: FakeSource, recording_sink: RecordingSink, settings: Settings):
    instance = FxBnr(
        f"sqlite:///{tmp_path / 'fx.db'}",
        source=fake_source,
        sink=recording_sink,
        settings=settings,
    )
    yield instance
    instance.close()
