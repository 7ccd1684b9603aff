"""Object storage contract for catalog media."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO


@dataclass
class StoredObject:
    """Where an uploaded object landed."""

    bucket: str
    path: str
    size_bytes: int
    content_type: str
    etag: str = ""


@dataclass
class HealthStatus:
    """Health check result."""

    healthy: bool
    latency_ms: float
    message: str | None = None
    details: dict[str, str] | None = None


class BlobStorageBase(ABC):
    """Bucketed object storage.

    The catalog keeps one bucket per media kind. Object paths are chosen
    by the caller and treated as opaque by the store.
    """

    @abstractmethod
    async def upload(
        self,
        bucket: str,
        path: str,
        data: BinaryIO,
        content_type: str = "application/octet-stream",
    ) -> StoredObject:
        """Stream a readable binary handle into ``bucket/path``.

        Args:
            bucket: Target bucket name.
            path: Object path within the bucket.
            data: Open binary handle, read from its start.
            content_type: MIME type recorded on the object.

        Returns:
            Location and size of the stored object.
        """

    @abstractmethod
    async def delete(self, bucket: str, path: str) -> bool:
        """Remove an object.

        Returns:
            True if it was removed, False if it was already absent.
        """

    @abstractmethod
    async def create_bucket(self, bucket: str) -> bool:
        """Create a bucket; False if it already existed."""

    @abstractmethod
    async def bucket_exists(self, bucket: str) -> bool:
        """Check if a bucket exists."""

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health.

        Returns:
            Health status with latency info.
        """
