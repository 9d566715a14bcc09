"""Helpers for locating the default SQLite database."""

from __future__ import annotations

from pathlib import Path
from typing import Final

__all__ = ["DEFAULT_SQLITE_DB_PATH", "default_sqlite_path"]

# Relative to the working directory of the running service, like the
# ``./db.sqlite`` file the HTTP service has always used.
DEFAULT_SQLITE_DB_PATH: Final[Path] = Path("db.sqlite")


def default_sqlite_path() -> Path:
    """Return the absolute path of the default SQLite database file."""

    return DEFAULT_SQLITE_DB_PATH.expanduser().resolve()
