"""Runtime settings for fx_bnr, read from the environment.

A ``.env`` file in the working directory is loaded first, so local setups
can keep credentials out of the shell.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

from fx_bnr.ingestion.bnr_xml import BNR_FEED_URL

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float, *, minimum: float = 0.0) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    return max(value, minimum)


class Settings:
    """Container for runtime-tunable settings."""

    def __init__(self) -> None:
        self.feed_url: str = os.getenv("FX_BNR_FEED_URL", BNR_FEED_URL)
        self.database_url: str | None = os.getenv("FX_BNR_DATABASE_URL") or None
        self.tick_seconds: float = _env_float("FX_BNR_TICK_SECONDS", 60.0, minimum=1.0)
        self.fetch_timeout: float = _env_float("FX_BNR_FETCH_TIMEOUT", 10.0, minimum=0.1)
        self.upload_timeout: float = _env_float("FX_BNR_UPLOAD_TIMEOUT", 30.0, minimum=0.1)
        self.export_bucket: str | None = os.getenv("FX_BNR_EXPORT_BUCKET") or None
        self.export_prefix: str = os.getenv("FX_BNR_EXPORT_PREFIX", "currencies")
        self.export_dir: Path = Path(os.getenv("FX_BNR_EXPORT_DIR", "exports"))
        self.scratch_dir: Path = Path(os.getenv("FX_BNR_SCRATCH_DIR", "."))
        self.aws_profile: str | None = os.getenv("FX_BNR_AWS_PROFILE") or None
        self.aws_region: str | None = os.getenv("FX_BNR_AWS_REGION") or None
        self.jwt_secret: str = os.getenv("FX_BNR_JWT_SECRET", "secret-key")
        self.token_ttl_hours: float = _env_float("FX_BNR_TOKEN_TTL_HOURS", 24.0, minimum=0.01)
        self.admin_username: str = os.getenv("FX_BNR_ADMIN_USERNAME", "test")
        self.admin_password: str = os.getenv("FX_BNR_ADMIN_PASSWORD", "test")
        self.scheduler_enabled: bool = _env_bool("FX_BNR_SCHEDULER_ENABLED", True)

    @property
    def exports_to_s3(self) -> bool:
        return bool(self.export_bucket)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings"]
