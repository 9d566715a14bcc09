"""MongoDB backend strategy."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Iterable, Sequence

from fx_bnr.db.base_backend import BackendStrategy, PersistenceResult
from fx_bnr.errors import StorageWriteFailure
from fx_bnr.ingestion.models import Observation
from fx_bnr.utils.logger import get_logger

try:  # pragma: no cover - optional dependency
    from pymongo import ASCENDING, MongoClient
    from pymongo.collection import Collection
    from pymongo.errors import ConfigurationError, PyMongoError
except ModuleNotFoundError:  # pragma: no cover - handled dynamically
    ASCENDING = 1  # type: ignore[assignment]
    MongoClient = None  # type: ignore[assignment]
    Collection = None  # type: ignore[assignment]
    ConfigurationError = Exception  # type: ignore[assignment]
    PyMongoError = Exception  # type: ignore[assignment]

LOGGER = get_logger(__name__)

# the whole configuration lives in one document so a replace is atomic
CONFIG_DOCUMENT_ID = "active"


class MongoBackend(BackendStrategy):
    """Backend strategy that keeps the observation log inside MongoDB."""

    def __init__(self, url: str, *, database: str | None = None) -> None:
        if MongoClient is None:  # pragma: no cover - defensive
            raise ModuleNotFoundError("pymongo is required for MongoDB backends")
        self.url = url
        self._client = MongoClient(url)
        if database is None:
            try:
                db = self._client.get_default_database()
            except ConfigurationError as exc:
                raise ValueError("MongoDB connection URI must include a database name") from exc
        else:
            db = self._client[database]
        self._values: Collection = db["currency_values"]
        self._configs: Collection = db["currency_configs"]

    def ensure_schema(self) -> None:
        try:
            LOGGER.info("Ensuring MongoDB currency collections exist")
            self._client.admin.command("ping")
            self._values.create_index([("rate_date", ASCENDING), ("currency", ASCENDING)])
        except PyMongoError as exc:  # pragma: no cover - error path
            raise StorageWriteFailure(f"Failed to ensure MongoDB schema: {exc}") from exc

    def insert_observations(self, rows: Sequence[Observation]) -> PersistenceResult:
        result = PersistenceResult()
        if not rows:
            return result
        created_at = datetime.now(timezone.utc)
        docs = [
            {
                "currency": row.currency,
                "rate": str(row.rate),
                "rate_date": row.rate_date.isoformat(),
                "created_at": created_at,
            }
            for row in rows
        ]
        try:
            self._values.insert_many(docs, ordered=True)
        except PyMongoError as exc:
            raise StorageWriteFailure(f"Failed to append MongoDB observations: {exc}") from exc
        result.inserted += len(docs)
        return result

    def fetch_observations(self) -> list[Observation]:
        try:
            docs = self._values.find({}).sort("_id", ASCENDING)
            return [
                Observation(
                    currency=doc["currency"],
                    rate=Decimal(str(doc["rate"])),
                    rate_date=date.fromisoformat(doc["rate_date"]),
                )
                for doc in docs
            ]
        except PyMongoError as exc:
            raise StorageWriteFailure(f"Failed to read MongoDB observations: {exc}") from exc

    def replace_currencies(self, codes: Iterable[str]) -> None:
        try:
            self._configs.replace_one(
                {"_id": CONFIG_DOCUMENT_ID},
                {"_id": CONFIG_DOCUMENT_ID, "currencies": sorted(set(codes))},
                upsert=True,
            )
        except PyMongoError as exc:
            raise StorageWriteFailure(f"Failed to store MongoDB configuration: {exc}") from exc

    def load_currencies(self) -> set[str]:
        try:
            doc = self._configs.find_one({"_id": CONFIG_DOCUMENT_ID})
        except PyMongoError as exc:
            raise StorageWriteFailure(f"Failed to load MongoDB configuration: {exc}") from exc
        if not doc:
            return set()
        return set(doc.get("currencies", []))

    def close(self) -> None:  # pragma: no cover - trivial cleanup
        self._client.close()


__all__ = ["MongoBackend"]
