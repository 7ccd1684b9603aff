"""Catalog repository: persistence of video documents."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from src.commons.infrastructure.documentdb.base import DocumentDBBase
from src.commons.settings.models import DocumentCollectionSettings
from src.commons.telemetry import get_logger
from src.domain.exceptions import (
    PersistenceException,
    ServerException,
    ValidationException,
)
from src.domain.models.video import Video
from src.domain.value_objects import DocumentId

# Fields that may only move through atomic increments, and never downwards
COUNTER_FIELDS = frozenset({"views"})

# Fields that may be flipped in place
TOGGLE_FIELDS = frozenset({"isPublished"})

# Fields a partial update may touch. owner, videoFile, duration and
# views are excluded: they are fixed at creation or counter-managed.
UPDATABLE_FIELDS = frozenset({"title", "description", "thumbnail"})


@dataclass(frozen=True)
class Revision:
    """A video as it was before a write and as that write left it."""

    previous: Video
    current: Video


class CatalogRepository:
    """Owns the video collection.

    Every operation is a single-document call, so each one is atomic at
    the document level. Ids are validated before any store round-trip.
    No blob-store calls happen here.
    """

    def __init__(
        self,
        document_db: DocumentDBBase,
        collections: DocumentCollectionSettings,
    ) -> None:
        """Initialize the repository.

        Args:
            document_db: Document database provider.
            collections: Collection names.
        """
        self._doc_db = document_db
        self._collection = collections.videos
        self._logger = get_logger(__name__)

    async def ensure_indexes(self) -> None:
        """Create the text index and the listing indexes."""
        await self._doc_db.create_index(
            self._collection,
            [("title", "text"), ("description", "text")],
            name="video_text",
        )
        await self._doc_db.create_index(
            self._collection,
            [("isPublished", 1), ("createdAt", -1)],
            name="published_recent",
        )
        await self._doc_db.create_index(
            self._collection,
            [("owner", 1), ("createdAt", -1)],
            name="owner_recent",
        )
        self._logger.info(
            "Catalog indexes ensured",
            extra={"collection": self._collection},
        )

    async def insert(self, fields: dict[str, Any]) -> Video:
        """Insert a new video document.

        Args:
            fields: Raw document as built by ``Video.new``.

        Returns:
            The stored video.

        Raises:
            PersistenceException: If the store does not acknowledge the insert.
        """
        try:
            doc_id = await self._doc_db.insert(self._collection, fields)
        except Exception as e:
            raise PersistenceException(
                "Something went wrong while creating the video document",
                errors=[str(e)],
            ) from e

        if not doc_id:
            raise PersistenceException(
                "Something went wrong while creating the video document"
            )

        self._logger.info("Video document inserted", extra={"video_id": doc_id})
        return Video(**{**fields, "id": doc_id})

    async def find_by_id(self, video_id: str) -> Video | None:
        """Find a video by id.

        Raises:
            ValidationException: If ``video_id`` is malformed (no store call).
        """
        vid = DocumentId.parse(video_id, field="videoId")
        try:
            doc = await self._doc_db.find_by_id(self._collection, vid.value)
        except Exception as e:
            raise ServerException(
                "Something went wrong while fetching the video",
                errors=[str(e)],
            ) from e

        if doc is None:
            self._logger.debug("Video not found", extra={"video_id": vid.value})
            return None
        return Video(**doc)

    async def update_fields(
        self,
        video_id: str,
        partial: dict[str, Any],
    ) -> Revision | None:
        """Set the given fields without touching the rest of the document.

        The write returns the document it replaced, so callers learn
        exactly which values this update overwrote even when other
        writers touched the document since they last read it.

        Args:
            video_id: Target video id.
            partial: Stored-field names to new values.

        Returns:
            The replaced and resulting video, or None if it does not exist.
        """
        vid = DocumentId.parse(video_id, field="videoId")
        unknown = set(partial) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(
                "cannot update these fields",
                errors=sorted(unknown),
            )
        updates = {**partial, "updatedAt": datetime.now(UTC)}
        before = await self._apply(
            vid, {"$set": updates}, "update", return_before=True
        )
        if before is None:
            return None
        return Revision(
            previous=Video(**before),
            current=Video(**{**before, **updates}),
        )

    async def increment_counter(
        self,
        video_id: str,
        field: str = "views",
        delta: int = 1,
    ) -> Video | None:
        """Atomically add ``delta`` to a counter field.

        Uses the store's ``$inc`` so concurrent increments never lose
        updates.
        """
        vid = DocumentId.parse(video_id, field="videoId")
        if field not in COUNTER_FIELDS:
            raise ValidationException(f"{field} is not a counter")
        if delta < 0:
            raise ValidationException(f"{field} cannot decrease")
        return await self._modify(vid, {"$inc": {field: delta}}, "increment")

    async def toggle_flag(
        self,
        video_id: str,
        field: str = "isPublished",
    ) -> Video | None:
        """Atomically negate a boolean field in place."""
        vid = DocumentId.parse(video_id, field="videoId")
        if field not in TOGGLE_FIELDS:
            raise ValidationException(f"{field} cannot be toggled")
        pipeline = [
            {"$set": {field: {"$not": [f"${field}"]}, "updatedAt": "$$NOW"}},
        ]
        return await self._modify(vid, pipeline, "toggle")

    async def delete(self, video_id: str) -> bool:
        """Delete a video document. False if it did not exist."""
        return await self.remove(video_id) is not None

    async def remove(self, video_id: str) -> Video | None:
        """Delete a video document and return it as it was when removed.

        The returned document names the blobs it referenced at the moment
        of deletion, including any written after the caller last read it.
        """
        vid = DocumentId.parse(video_id, field="videoId")
        try:
            doc = await self._doc_db.find_one_and_delete(self._collection, vid.value)
        except Exception as e:
            raise PersistenceException(
                "Something went wrong while deleting the video document",
                errors=[str(e)],
            ) from e

        if doc is None:
            return None
        self._logger.info("Video document deleted", extra={"video_id": vid.value})
        return Video(**doc)

    async def _modify(
        self,
        vid: DocumentId,
        update: dict[str, Any] | list[dict[str, Any]],
        operation: str,
    ) -> Video | None:
        doc = await self._apply(vid, update, operation)
        return None if doc is None else Video(**doc)

    async def _apply(
        self,
        vid: DocumentId,
        update: dict[str, Any] | list[dict[str, Any]],
        operation: str,
        return_before: bool = False,
    ) -> dict[str, Any] | None:
        try:
            doc = await self._doc_db.find_one_and_update(
                self._collection,
                vid.value,
                update,
                return_before=return_before,
            )
        except Exception as e:
            raise PersistenceException(
                f"Something went wrong during video {operation}",
                errors=[str(e)],
            ) from e

        if doc is None:
            self._logger.debug(
                f"Video not found for {operation}",
                extra={"video_id": vid.value},
            )
            return None
        return doc
