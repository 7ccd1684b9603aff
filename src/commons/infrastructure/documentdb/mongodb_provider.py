"""MongoDB implementation of document database."""

import logging
import time
from typing import Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ReturnDocument

from src.commons.infrastructure.blob.base import HealthStatus
from src.commons.infrastructure.documentdb.base import DocumentDBBase, IndexKey
from src.commons.telemetry import log_exceptions, timed


def normalize_document(value: Any) -> Any:
    """Convert a raw BSON document into plain Python values.

    ``_id`` keys are renamed to ``id`` and ObjectIds become strings, at
    every nesting level (joined owner documents carry their own ``_id``).
    """
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, list):
        return [normalize_document(v) for v in value]
    if isinstance(value, dict):
        return {
            ("id" if k == "_id" else k): normalize_document(v)
            for k, v in value.items()
        }
    return value


class MongoDBDocumentDB(DocumentDBBase):
    """MongoDB implementation of document database.

    Uses Motor for async operations. Primary keys are ObjectIds; callers
    pass them as 24-hex strings that have already been validated.
    """

    def __init__(
        self,
        connection_string: str,
        database_name: str,
    ) -> None:
        """Initialize MongoDB client.

        Args:
            connection_string: MongoDB connection URI.
            database_name: Name of the database to use.
        """
        self._client: AsyncIOMotorClient[dict[str, Any]] = AsyncIOMotorClient(
            connection_string
        )
        self._db: AsyncIOMotorDatabase[dict[str, Any]] = self._client[database_name]
        self._database_name = database_name

    async def insert(
        self,
        collection: str,
        document: dict[str, Any],
    ) -> str:
        """Insert a document and return its generated id."""
        doc = document.copy()
        if "id" in doc:
            doc["_id"] = ObjectId(doc.pop("id"))

        result = await self._db[collection].insert_one(doc)
        return str(result.inserted_id)

    async def find_by_id(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        """Find a document by ID."""
        doc = await self._db[collection].find_one({"_id": ObjectId(document_id)})
        if doc is None:
            return None
        return dict(normalize_document(doc))

    async def find_one_and_update(
        self,
        collection: str,
        document_id: str,
        update: dict[str, Any] | list[dict[str, Any]],
        *,
        return_before: bool = False,
    ) -> dict[str, Any] | None:
        """Apply an update atomically and return the document."""
        doc = await self._db[collection].find_one_and_update(
            {"_id": ObjectId(document_id)},
            update,
            return_document=(
                ReturnDocument.BEFORE if return_before else ReturnDocument.AFTER
            ),
        )
        if doc is None:
            return None
        return dict(normalize_document(doc))

    async def find_one_and_delete(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        """Delete a document by ID and return what it held."""
        doc = await self._db[collection].find_one_and_delete(
            {"_id": ObjectId(document_id)}
        )
        if doc is None:
            return None
        return dict(normalize_document(doc))

    @timed
    @log_exceptions(level=logging.WARNING, message="Aggregation pipeline failed")
    async def aggregate(
        self,
        collection: str,
        pipeline: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """Run an aggregation pipeline and collect normalized results."""
        cursor = self._db[collection].aggregate(pipeline)
        return [dict(normalize_document(doc)) async for doc in cursor]

    async def create_index(
        self,
        collection: str,
        fields: list[IndexKey],
        unique: bool = False,
        name: str | None = None,
    ) -> str:
        """Create an index on the collection."""
        kwargs: dict[str, Any] = {"unique": unique}
        if name:
            kwargs["name"] = name
        index_name = await self._db[collection].create_index(fields, **kwargs)
        return str(index_name)

    async def health_check(self) -> HealthStatus:
        """Check service health."""
        start = time.perf_counter()
        try:
            await self._client.admin.command("ping")
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=True,
                latency_ms=latency_ms,
                message="MongoDB is healthy",
                details={"database": self._database_name},
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"MongoDB health check failed: {e}",
                details={"database": self._database_name, "error": str(e)},
            )

    async def close(self) -> None:
        """Close the client connection."""
        self._client.close()
