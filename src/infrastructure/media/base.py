"""Abstract base classes for the media (blob store client) layer."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class MediaKind(str, Enum):
    """Kinds of binary assets attached to a video."""

    VIDEO = "video"
    THUMBNAIL = "thumbnail"


@dataclass
class LocalMedia:
    """A payload sitting on local disk, waiting to be uploaded."""

    path: Path
    content_type: str | None = None
    original_filename: str | None = None


@dataclass
class UploadedMedia:
    """Result of a successful upload."""

    url: str
    kind: MediaKind
    size_bytes: int
    duration: float | None = None


class MediaStoreError(Exception):
    """Raised when the blob store cannot complete a media operation."""

    def __init__(self, operation: str, target: str, reason: str) -> None:
        self.operation = operation
        self.target = target
        self.reason = reason
        super().__init__(f"Media {operation} failed for {target}: {reason}")


class DurationProbeBase(ABC):
    """Reads the playback duration of a local media file."""

    @abstractmethod
    async def probe_duration(self, path: Path) -> float:
        """Return the duration of the media at ``path`` in seconds.

        Raises:
            MediaStoreError: If the file cannot be read as media.
        """


class MediaStoreBase(ABC):
    """Uploads local payloads and deletes stored references.

    Implementations are independent of the document store: callers must
    never assume the two are transactionally linked.
    """

    @abstractmethod
    async def upload(self, media: LocalMedia, kind: MediaKind) -> UploadedMedia:
        """Upload a local payload.

        Args:
            media: Local file to upload.
            kind: Asset kind; videos also get a duration.

        Returns:
            Stable reference plus basic media metadata.

        Raises:
            MediaStoreError: If the payload cannot be read or stored.
        """

    @abstractmethod
    async def delete(self, reference: str) -> bool:
        """Delete a previously returned reference.

        Returns:
            True if the referenced blob no longer exists afterwards,
            False if the reference does not belong to this store.

        Raises:
            MediaStoreError: If the store call fails.
        """
