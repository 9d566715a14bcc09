"""Logging utilities for the fx_bnr package."""

from __future__ import annotations

import logging
import os
from typing import Optional

_LOGGER: Optional[logging.Logger] = None


def get_logger(name: str = "fx_bnr") -> logging.Logger:
    """Return a module-level logger configured with a simple formatter.

    The root level comes from ``FX_BNR_LOG_LEVEL`` the first time a logger is
    requested.
    """
    global _LOGGER
    if _LOGGER is None:
        level_name = os.getenv("FX_BNR_LOG_LEVEL", "INFO").upper()
        logging.basicConfig(
            level=getattr(logging, level_name, logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
        _LOGGER = logging.getLogger(name)
    return logging.getLogger(name)
