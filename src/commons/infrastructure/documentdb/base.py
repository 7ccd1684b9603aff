"""Abstract base class for document database operations."""

from abc import ABC, abstractmethod
from typing import Any

from src.commons.infrastructure.blob.base import HealthStatus

IndexKey = tuple[str, int | str]


class DocumentDBBase(ABC):
    """Abstract base class for document database operations.

    Every method works on a single document or runs one server-side
    command, so each call is atomic at the document level. Returned
    documents expose their primary key as a string under ``id``.
    """

    @abstractmethod
    async def insert(
        self,
        collection: str,
        document: dict[str, Any],
    ) -> str:
        """Insert a document.

        Args:
            collection: Collection name.
            document: Document to insert.

        Returns:
            Generated document ID.
        """

    @abstractmethod
    async def find_by_id(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        """Find a document by ID.

        Returns:
            Document if found, None otherwise.
        """

    @abstractmethod
    async def find_one_and_update(
        self,
        collection: str,
        document_id: str,
        update: dict[str, Any] | list[dict[str, Any]],
        *,
        return_before: bool = False,
    ) -> dict[str, Any] | None:
        """Atomically apply an update and return the document.

        Args:
            collection: Collection name.
            document_id: Document ID to update.
            update: Update operators (``{"$set": ...}``, ``{"$inc": ...}``)
                or an update pipeline (list of stages).
            return_before: Return the document as it was just before this
                update instead of after it.

        Returns:
            The document, or None if no document has that ID.
        """

    @abstractmethod
    async def find_one_and_delete(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        """Atomically delete a document.

        Returns:
            The document as it was when deleted, or None if not found.
        """

    @abstractmethod
    async def aggregate(
        self,
        collection: str,
        pipeline: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """Run an aggregation pipeline and collect the results.

        Args:
            collection: Collection the pipeline starts from.
            pipeline: Ordered list of stage documents.

        Returns:
            Result documents.
        """

    @abstractmethod
    async def create_index(
        self,
        collection: str,
        fields: list[IndexKey],
        unique: bool = False,
        name: str | None = None,
    ) -> str:
        """Create an index on the collection.

        Args:
            collection: Collection name.
            fields: Index keys [(field, direction)]. Direction is 1, -1,
                or "text" for a full-text index.
            unique: Whether index should be unique.
            name: Optional index name.

        Returns:
            Index name.
        """

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health."""

    @abstractmethod
    async def close(self) -> None:
        """Release client resources."""
