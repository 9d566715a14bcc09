"""Export sinks for snapshot blobs.

Every upload creates a new remote object: the object is placed under a fresh
file id, so uploading ``currencies.json`` twice leaves two objects behind.
"""

from __future__ import annotations

import os
import tempfile
import uuid
from pathlib import Path
from typing import Any, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from fx_bnr.errors import SinkUnavailable
from fx_bnr.utils.logger import get_logger

LOGGER = get_logger(__name__)


class BlobSink(Protocol):
    """Destination for named snapshot blobs."""

    def upload(self, name: str, content: bytes) -> str:
        """Store ``content`` as a new object called ``name`` and return its id."""
        ...  # pragma: no cover - protocol definition


def _new_file_id() -> str:
    return uuid.uuid4().hex


def write_scratch_file(directory: str | Path, name: str, content: bytes) -> Path:
    """Write (or overwrite) the local scratch copy of an export.

    The content lands in a temporary file first and is then renamed over
    ``name``, so readers never see a partially written export.
    """

    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / name
    fd, tmp_name = tempfile.mkstemp(dir=target_dir, prefix=f".{name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(content)
        os.replace(tmp_name, target)
    except OSError:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return target


def create_s3_client(
    *,
    profile: str | None = None,
    region: str | None = None,
    timeout: float = 30.0,
) -> Any:
    """Create a boto3 S3 client with bounded connect/read timeouts."""

    session_kwargs: dict[str, str] = {}
    if profile:
        session_kwargs["profile_name"] = profile
    if region:
        session_kwargs["region_name"] = region
    session = boto3.session.Session(**session_kwargs)
    config = Config(
        connect_timeout=timeout,
        read_timeout=timeout,
        retries={"max_attempts": 1, "mode": "standard"},
    )
    return session.client("s3", config=config)


class S3BlobSink:
    """Upload blobs to ``s3://<bucket>/<prefix>/<file_id>/<name>``."""

    def __init__(
        self,
        bucket: str,
        *,
        prefix: str = "currencies",
        client: Any | None = None,
        content_type: str = "application/json",
        profile: str | None = None,
        region: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.content_type = content_type
        self._client = client or create_s3_client(profile=profile, region=region, timeout=timeout)

    def object_key(self, file_id: str, name: str) -> str:
        if self.prefix:
            return f"{self.prefix}/{file_id}/{name}"
        return f"{file_id}/{name}"

    def upload(self, name: str, content: bytes) -> str:
        file_id = _new_file_id()
        key = self.object_key(file_id, name)
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=self.content_type,
            )
        except (BotoCoreError, ClientError) as error:
            raise SinkUnavailable(
                f"Failed to upload {name} to s3://{self.bucket}/{key}: {error}. "
                "Check AWS credentials and bucket permissions."
            ) from error
        LOGGER.info("Uploaded %s to s3://%s/%s (file id %s)", name, self.bucket, key, file_id)
        return file_id


class LocalDirectorySink:
    """Store blobs under ``<root>/<file_id>/<name>`` on the local filesystem."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def upload(self, name: str, content: bytes) -> str:
        file_id = _new_file_id()
        target = self.root / file_id / name
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as error:
            raise SinkUnavailable(f"Failed to write {name} under {self.root}: {error}") from error
        LOGGER.info("Stored %s at %s (file id %s)", name, target, file_id)
        return file_id


__all__ = [
    "BlobSink",
    "LocalDirectorySink",
    "S3BlobSink",
    "create_s3_client",
    "write_scratch_file",
]
