from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
import requests

from fx_bnr.errors import MalformedFeed, UpstreamUnavailable
from fx_bnr.ingestion.bnr_xml import BNR_FEED_URL, BNRFeedClient, parse_bnr_feed

FEED_XML = """<?xml version="1.0" encoding="utf-8"?>
<DataSet xmlns="http://www.bnr.ro/xsd" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
  <Header>
    <Publisher>National Bank of Romania</Publisher>
    <PublishingDate>2024-01-10</PublishingDate>
    <MessageType>DR</MessageType>
  </Header>
  <Body>
    <Subject>Reference rates</Subject>
    <OrigCurrency>RON</OrigCurrency>
    <Cube date="2024-01-10">
      <Rate currency="EUR">4.9714</Rate>
      <Rate currency="HUF" multiplier="100">1.3001</Rate>
      <Rate currency="USD">4.5390</Rate>
    </Cube>
  </Body>
</DataSet>
"""


class _FakeResponse:
    def __init__(self, content: bytes, status_code: int = 200) -> None:
        self.content = content
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, error: Exception | None = None):
        self.headers: dict[str, str] = {}
        self.response = response
        self.error = error
        self.requests: list[tuple[str, float]] = []

    def get(self, url: str, timeout: float) -> _FakeResponse:
        self.requests.append((url, timeout))
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response

    def close(self) -> None:
        return None


def test_parse_bnr_feed_extracts_date_rates_and_multipliers() -> None:
    feed = parse_bnr_feed(FEED_XML)

    assert feed.rate_date == date(2024, 1, 10)
    assert feed.rates == [
        ("EUR", Decimal("4.9714")),
        ("HUF", Decimal("1.3001")),
        ("USD", Decimal("4.5390")),
    ]
    assert feed.multipliers == {"HUF": 100}
    # published text survives untouched, trailing zeros included
    assert feed.to_snapshot()["USD"] == "4.5390"


def test_parse_bnr_feed_accepts_bytes() -> None:
    feed = parse_bnr_feed(FEED_XML.encode("utf-8"))

    assert feed.currencies == ["EUR", "HUF", "USD"]


@pytest.mark.parametrize(
    "document, message",
    [
        ("<DataSet><Body></Body></DataSet>", "Cube"),
        ("<DataSet><Body><Cube><Rate currency='USD'>4.5</Rate></Cube></Body></DataSet>", "date"),
        ("<DataSet><Body><Cube date='10/01/2024'><Rate currency='USD'>4.5</Rate></Cube></Body></DataSet>", "date"),
        ("<DataSet><Body><Cube date='2024-01-10'></Cube></Body></DataSet>", "no Rate"),
        ("<DataSet><Body><Cube date='2024-01-10'><Rate>4.5</Rate></Cube></Body></DataSet>", "currency"),
        ("<DataSet><Body><Cube date='2024-01-10'><Rate currency='USD'>n/a</Rate></Cube></Body></DataSet>", "decimal"),
        ("<DataSet><Body><Cube date='2024-01-10'><Rate currency='HUF' multiplier='x'>1.3</Rate></Cube></Body></DataSet>", "Multiplier"),
    ],
)
def test_parse_bnr_feed_rejects_malformed_documents(document: str, message: str) -> None:
    with pytest.raises(MalformedFeed, match=message):
        parse_bnr_feed(document)


def test_client_fetch_uses_timeout_and_parses_response() -> None:
    session = _FakeSession(_FakeResponse(FEED_XML.encode("utf-8")))
    client = BNRFeedClient(timeout=2.5, session=session)

    feed = client.fetch()

    assert session.requests == [(BNR_FEED_URL, 2.5)]
    assert session.headers["User-Agent"].startswith("fx-bnr")
    assert feed.rate_date == date(2024, 1, 10)


@pytest.mark.parametrize(
    "session, message",
    [
        (_FakeSession(error=requests.Timeout("slow")), "did not answer"),
        (_FakeSession(error=requests.ConnectionError("refused")), "Unable to reach"),
        (_FakeSession(_FakeResponse(b"", status_code=503)), "HTTP 503"),
    ],
)
def test_client_fetch_maps_transport_errors(session: _FakeSession, message: str) -> None:
    client = BNRFeedClient("https://example.test/feed.xml", session=session)

    with pytest.raises(UpstreamUnavailable, match=message):
        client.fetch()


def test_client_fetch_propagates_malformed_feed() -> None:
    client = BNRFeedClient(session=_FakeSession(_FakeResponse(b"<html>maintenance</html>")))

    with pytest.raises(MalformedFeed):
        client.fetch()
