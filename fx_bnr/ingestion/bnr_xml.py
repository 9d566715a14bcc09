"""Client and parser for the National Bank of Romania reference rate feed."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

import requests
from bs4 import BeautifulSoup

from fx_bnr.errors import MalformedFeed, UpstreamUnavailable
from fx_bnr.ingestion.models import FeedSnapshot
from fx_bnr.utils.dates import parse_date
from fx_bnr.utils.logger import get_logger

LOGGER = get_logger(__name__)

BNR_FEED_URL = "https://www.bnr.ro/nbrfxrates.xml"


def _parse_rate(currency: str, value: str) -> Decimal:
    try:
        rate = Decimal(value.strip())
    except (InvalidOperation, AttributeError) as exc:
        raise MalformedFeed(f"Rate for {currency} is not a decimal: {value!r}") from exc
    if not rate.is_finite():
        raise MalformedFeed(f"Rate for {currency} is not a finite decimal: {value!r}")
    return rate


def parse_bnr_feed(document: str | bytes) -> FeedSnapshot:
    """Decode a ``nbrfxrates.xml`` document into a :class:`FeedSnapshot`.

    Only the first ``Cube`` of ``DataSet/Body`` is read; the daily feed never
    publishes more than one. Each ``Rate`` must carry a ``currency``
    attribute and a decimal body.
    """

    soup = BeautifulSoup(document, "xml")
    dataset = soup.find("DataSet")
    body = dataset.find("Body") if dataset is not None else None
    cube = body.find("Cube") if body is not None else None
    if cube is None:
        raise MalformedFeed("Feed is missing the DataSet/Body/Cube node")

    raw_date = cube.get("date")
    if not raw_date:
        raise MalformedFeed("Cube node has no date attribute")
    try:
        rate_date = parse_date(raw_date)
    except ValueError as exc:
        raise MalformedFeed(f"Unparsable feed date: {raw_date!r}") from exc

    rate_nodes = cube.find_all("Rate")
    if not rate_nodes:
        raise MalformedFeed(f"Cube for {raw_date} contains no Rate nodes")

    rates: list[tuple[str, Decimal]] = []
    multipliers: dict[str, int] = {}
    for node in rate_nodes:
        currency = (node.get("currency") or "").strip()
        if not currency:
            raise MalformedFeed("Rate node has no currency attribute")
        rates.append((currency, _parse_rate(currency, node.get_text())))
        multiplier = node.get("multiplier")
        if multiplier:
            try:
                multipliers[currency] = int(multiplier)
            except ValueError as exc:
                raise MalformedFeed(
                    f"Multiplier for {currency} is not an integer: {multiplier!r}"
                ) from exc
    return FeedSnapshot(rate_date=rate_date, rates=rates, multipliers=multipliers)


class BNRFeedClient:
    """Fetch the daily BNR feed over HTTP with an explicit timeout."""

    def __init__(
        self,
        url: str = BNR_FEED_URL,
        *,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", "fx-bnr-ingestor/1.0")

    def fetch(self) -> FeedSnapshot:
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
        except requests.Timeout as exc:
            raise UpstreamUnavailable(
                f"BNR feed did not answer within {self.timeout}s ({self.url})"
            ) from exc
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else "?"
            raise UpstreamUnavailable(f"BNR feed responded with HTTP {status} for {self.url}") from exc
        except requests.RequestException as exc:
            raise UpstreamUnavailable(f"Unable to reach BNR feed at {self.url}: {exc}") from exc

        feed = parse_bnr_feed(response.content)
        LOGGER.info(
            "Fetched %s rates for %s from %s", len(feed.rates), feed.rate_date, self.url
        )
        return feed

    def close(self) -> None:  # pragma: no cover - trivial
        self.session.close()

    def __enter__(self) -> "BNRFeedClient":  # pragma: no cover - trivial
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # pragma: no cover - trivial
        self.close()


__all__ = ["BNR_FEED_URL", "BNRFeedClient", "parse_bnr_feed"]
