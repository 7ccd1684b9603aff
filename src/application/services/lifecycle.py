"""Lifecycle coordinator: mutations spanning the catalog and the blob store.

The two stores are not transactionally linked. Consistency comes from
step ordering (upload before reference, unreference before delete) and
from compensations that remove blobs a failed step left behind.
"""

import asyncio

from src.application.dtos.videos import PublishVideoRequest, UpdateVideoRequest
from src.application.services.catalog import CatalogRepository
from src.application.services.saga import Compensations
from src.commons.telemetry import LogContext, get_logger, timed
from src.domain.exceptions import (
    DomainException,
    PersistenceException,
    UpstreamDeleteException,
    UpstreamUploadException,
    ValidationException,
    VideoNotFoundException,
)
from src.domain.models.video import Video
from src.domain.result import Success, returns_result
from src.domain.value_objects import DocumentId
from src.infrastructure.media.base import (
    LocalMedia,
    MediaKind,
    MediaStoreBase,
    MediaStoreError,
    UploadedMedia,
)


def _required_text(value: str | None, field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationException(f"{field} is required")
    return text


def _optional_text(value: str | None, field: str) -> str | None:
    """None keeps the stored value; an explicit blank is rejected."""
    if value is None:
        return None
    text = value.strip()
    if not text:
        raise ValidationException(f"{field} cannot be empty")
    return text


class VideoLifecycleService:
    """Create, edit and delete videos together with their blobs."""

    def __init__(
        self,
        repository: CatalogRepository,
        media_store: MediaStoreBase,
    ) -> None:
        """Initialize the lifecycle service.

        Args:
            repository: Catalog persistence.
            media_store: Blob store client for video and thumbnail payloads.
        """
        self._repo = repository
        self._media = media_store
        self._logger = get_logger(__name__)

    async def _upload(self, media: LocalMedia, kind: MediaKind) -> UploadedMedia:
        try:
            return await self._media.upload(media, kind)
        except MediaStoreError as e:
            raise UpstreamUploadException(kind.value, e.reason) from e

    async def _delete_blob(self, reference: str) -> bool:
        """Delete a blob, reporting failure as False instead of raising."""
        try:
            return await self._media.delete(reference)
        except MediaStoreError as e:
            self._logger.warning(
                "Blob delete failed",
                extra={"reference": reference, "reason": e.reason},
            )
            return False

    async def _compensate(self, saga: Compensations, error: Exception) -> None:
        failed = await saga.run()
        if failed and isinstance(error, DomainException):
            error.errors.extend(f"undeleted blob: {name}" for name in failed)

    @returns_result
    @timed
    async def publish(
        self,
        request: PublishVideoRequest,
        owner_id: str | None,
    ) -> Success[Video]:
        """Upload both payloads, then record the video.

        All input checks run before the first upload.
        """
        title = _required_text(request.title, "title")
        description = _required_text(request.description, "description")
        if request.video is None:
            raise ValidationException("video file is required")
        if request.thumbnail is None:
            raise ValidationException("thumbnail is required")
        owner = DocumentId.parse(owner_id, field="owner")

        with LogContext(operation="publish", owner_id=owner.value):
            saga = Compensations("publish")

            video = await self._upload(request.video, MediaKind.VIDEO)
            saga.add(video.url, lambda: self._delete_blob(video.url))

            try:
                thumbnail = await self._upload(request.thumbnail, MediaKind.THUMBNAIL)
            except Exception as e:
                await self._compensate(saga, e)
                raise
            saga.add(thumbnail.url, lambda: self._delete_blob(thumbnail.url))

            fields = Video.new(
                title=title,
                description=description,
                video_file=video.url,
                thumbnail=thumbnail.url,
                duration=video.duration or 0.0,
                owner=owner.value,
                is_published=request.is_published,
            )
            try:
                inserted = await self._repo.insert(fields)
            except Exception as e:
                await self._compensate(saga, e)
                raise
            saga.clear()

            stored = await self._repo.find_by_id(inserted.id)
            if stored is None:
                raise PersistenceException(
                    "Something went wrong while uploading the video",
                    errors=[f"video {inserted.id} could not be read back"],
                )

            self._logger.info(
                "Video published",
                extra={"video_id": stored.id, "duration": stored.duration},
            )
            return Success(
                stored,
                message="video uploaded Successfully",
                status_code=201,
            )

    @returns_result
    @timed
    async def update(
        self,
        video_id: str,
        request: UpdateVideoRequest,
        caller_id: str | None = None,
    ) -> Success[Video]:
        """Edit title, description and/or thumbnail.

        A replacement thumbnail is uploaded and referenced before the old
        one is deleted, so the document never points at a missing blob.
        The blob deleted is the one the write itself replaced.
        """
        vid = DocumentId.parse(video_id, field="videoId")
        if request.is_empty:
            raise ValidationException("at least one field is required to update video")
        title = _optional_text(request.title, "title")
        description = _optional_text(request.description, "description")

        with LogContext(operation="update", video_id=vid.value, caller_id=caller_id):
            existing = await self._repo.find_by_id(vid.value)
            if existing is None:
                raise VideoNotFoundException(vid.value)

            partial: dict[str, str] = {}
            if title is not None:
                partial["title"] = title
            if description is not None:
                partial["description"] = description

            saga = Compensations("update")
            if request.thumbnail is not None:
                uploaded = await self._upload(request.thumbnail, MediaKind.THUMBNAIL)
                partial["thumbnail"] = uploaded.url
                saga.add(uploaded.url, lambda: self._delete_blob(uploaded.url))

            try:
                revision = await self._repo.update_fields(vid.value, partial)
            except Exception as e:
                await self._compensate(saga, e)
                raise
            if revision is None:
                error = VideoNotFoundException(vid.value)
                await self._compensate(saga, error)
                raise error
            saga.clear()

            # The thumbnail this write overwrote, not the one read above
            replaced = revision.previous.thumbnail
            if "thumbnail" in partial and replaced != partial["thumbnail"]:
                if not await self._delete_blob(replaced):
                    self._logger.error(
                        "Replaced thumbnail could not be deleted",
                        extra={"orphaned_reference": replaced},
                    )

            self._logger.info("Video updated", extra={"fields": sorted(partial)})
            return Success(revision.current, message="Video updated successfully")

    @returns_result
    @timed
    async def delete(
        self,
        video_id: str,
        caller_id: str | None = None,
    ) -> Success[None]:
        """Remove the document, then the blobs it held when removed."""
        vid = DocumentId.parse(video_id, field="videoId")

        with LogContext(operation="delete", video_id=vid.value, caller_id=caller_id):
            removed = await self._repo.remove(vid.value)
            if removed is None:
                raise VideoNotFoundException(vid.value)

            references = [removed.video_file, removed.thumbnail]
            outcomes = await asyncio.gather(
                *(self._delete_blob(ref) for ref in references)
            )
            orphaned = [ref for ref, ok in zip(references, outcomes) if not ok]
            if orphaned:
                self._logger.error(
                    "Video deleted but its blobs were not removed",
                    extra={"orphaned_references": orphaned},
                )
                raise UpstreamDeleteException(
                    "Error while deleting the video media", references=orphaned
                )

            self._logger.info("Video deleted")
            return Success(None, message="Video Deleted successfully")

    @returns_result
    @timed
    async def toggle_publish(
        self,
        video_id: str,
        caller_id: str | None = None,
    ) -> Success[Video]:
        """Flip ``isPublished`` in a single atomic update."""
        vid = DocumentId.parse(video_id, field="videoId")
        context = LogContext(
            operation="toggle_publish",
            video_id=vid.value,
            caller_id=caller_id,
        )
        with context:
            toggled = await self._repo.toggle_flag(vid.value, "isPublished")
            if toggled is None:
                raise VideoNotFoundException(vid.value)
            self._logger.info(
                "Publish status changed",
                extra={"is_published": toggled.is_published},
            )
            return Success(toggled, message="Published Status changed successfully")

    @returns_result
    async def increment_views(self, video_id: str) -> Success[None]:
        """Add one view with an atomic increment."""
        vid = DocumentId.parse(video_id, field="videoId")
        updated = await self._repo.increment_counter(vid.value, "views", 1)
        if updated is None:
            raise VideoNotFoundException(vid.value)
        return Success(None, message="view count updated successfully")
