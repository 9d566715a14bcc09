"""Date helpers shared by the feed parser, the API and the CLI."""

from __future__ import annotations

from datetime import date, datetime

FEED_DATE_FORMAT = "%Y-%m-%d"


def parse_date(value: str | date) -> date:
    """Parse a date string in the feed's native ISO format to :class:`date`.

    Only zero-padded ``YYYY-MM-DD`` text is accepted; ``2024-1-10`` raises
    :class:`ValueError` like any other malformed value.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    parsed = datetime.strptime(text, FEED_DATE_FORMAT).date()
    if parsed.isoformat() != text:
        raise ValueError(f"date {value!r} does not match format 'YYYY-MM-DD'")
    return parsed


def normalise_date(value: object) -> date:
    """Coerce values coming back from a database driver into :class:`date`."""

    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, datetime):
        return value.date()
    return date.fromisoformat(str(value))


__all__ = ["FEED_DATE_FORMAT", "parse_date", "normalise_date"]
