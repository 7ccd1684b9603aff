"""Media store backed by an object storage bucket per asset kind."""

import mimetypes
from uuid import uuid4

from src.commons.infrastructure.blob.base import BlobStorageBase
from src.commons.settings.models import BlobStorageSettings, MediaSettings
from src.commons.telemetry import get_logger
from src.infrastructure.media.base import (
    DurationProbeBase,
    LocalMedia,
    MediaKind,
    MediaStoreBase,
    MediaStoreError,
    UploadedMedia,
)


class BlobMediaStore(MediaStoreBase):
    """Uploads videos and thumbnails to blob storage.

    References handed out are public URLs of the form
    ``{public_base_url}/{bucket}/{object}``; ``delete`` parses them back.
    """

    def __init__(
        self,
        blob_storage: BlobStorageBase,
        duration_probe: DurationProbeBase,
        blob_settings: BlobStorageSettings,
        media_settings: MediaSettings,
    ) -> None:
        """Initialize the media store.

        Args:
            blob_storage: Blob storage provider.
            duration_probe: Probe used to read video durations.
            blob_settings: Bucket names and public URL configuration.
            media_settings: Default content types.
        """
        self._blob = blob_storage
        self._probe = duration_probe
        self._base_url = blob_settings.resolved_public_base_url
        self._buckets = {
            MediaKind.VIDEO: blob_settings.buckets.videos,
            MediaKind.THUMBNAIL: blob_settings.buckets.thumbnails,
        }
        self._default_content_types = {
            MediaKind.VIDEO: media_settings.video_content_type,
            MediaKind.THUMBNAIL: media_settings.thumbnail_content_type,
        }
        self._logger = get_logger(__name__)

    async def ensure_buckets_exist(self) -> None:
        """Create the asset buckets if they are missing."""
        for bucket in self._buckets.values():
            if not await self._blob.bucket_exists(bucket):
                await self._blob.create_bucket(bucket)
                self._logger.info(f"Created bucket: {bucket}")

    def reference_for(self, bucket: str, path: str) -> str:
        """Build the public reference for a stored object."""
        return f"{self._base_url}/{bucket}/{path}"

    def parse_reference(self, reference: str) -> tuple[str, str] | None:
        """Split a reference into (bucket, path), or None if it is foreign."""
        prefix = f"{self._base_url}/"
        if not reference or not reference.startswith(prefix):
            return None
        bucket, _, path = reference[len(prefix) :].partition("/")
        if bucket not in self._buckets.values() or not path:
            return None
        return bucket, path

    async def upload(self, media: LocalMedia, kind: MediaKind) -> UploadedMedia:
        """Upload a local payload; videos are probed for duration first."""
        if not media.path.is_file():
            raise MediaStoreError("upload", str(media.path), "local file not found")

        duration: float | None = None
        if kind is MediaKind.VIDEO:
            duration = await self._probe.probe_duration(media.path)

        bucket = self._buckets[kind]
        path = f"{uuid4().hex}{media.path.suffix.lower()}"
        content_type = (
            media.content_type
            or mimetypes.guess_type(media.path.name)[0]
            or self._default_content_types[kind]
        )

        self._logger.debug(
            "Uploading media to blob storage",
            extra={
                "kind": kind.value,
                "bucket": bucket,
                "blob_path": path,
                "content_type": content_type,
            },
        )

        try:
            with media.path.open("rb") as f:
                stored = await self._blob.upload(
                    bucket,
                    path,
                    f,
                    content_type=content_type,
                )
        except Exception as e:
            raise MediaStoreError("upload", str(media.path), str(e)) from e

        url = self.reference_for(bucket, path)
        self._logger.info(
            "Media uploaded",
            extra={"kind": kind.value, "url": url, "size_bytes": stored.size_bytes},
        )
        return UploadedMedia(
            url=url,
            kind=kind,
            size_bytes=stored.size_bytes,
            duration=duration,
        )

    async def delete(self, reference: str) -> bool:
        """Delete a stored reference; already-absent blobs count as deleted."""
        parsed = self.parse_reference(reference)
        if parsed is None:
            self._logger.warning(
                "Refusing to delete foreign blob reference",
                extra={"reference": reference},
            )
            return False

        bucket, path = parsed
        try:
            removed = await self._blob.delete(bucket, path)
        except Exception as e:
            raise MediaStoreError("delete", reference, str(e)) from e

        if not removed:
            self._logger.debug(
                "Blob already absent",
                extra={"reference": reference},
            )
        return True
