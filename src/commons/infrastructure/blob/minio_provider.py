"""MinIO/S3 object storage provider."""

import asyncio
import functools
import io
import time
from collections.abc import Callable
from typing import Any, BinaryIO, TypeVar

from minio import Minio
from minio.error import S3Error

from src.commons.infrastructure.blob.base import (
    BlobStorageBase,
    HealthStatus,
    StoredObject,
)

R = TypeVar("R")

_MISSING_CODES = frozenset({"NoSuchKey", "NoSuchObject"})


def _payload_length(data: BinaryIO) -> int:
    """Bytes left between the start of the handle and its end."""
    data.seek(0, io.SEEK_END)
    length = data.tell()
    data.seek(0)
    return length


class MinioBlobStorage(BlobStorageBase):
    """Object storage over the minio client.

    Works against MinIO locally and AWS S3 in production. The minio
    client blocks, so each call is pushed to the default executor.
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        secure: bool = False,
        region: str | None = None,
    ) -> None:
        """Initialize the minio client.

        Args:
            endpoint: MinIO/S3 host and port (e.g. "localhost:9000").
            access_key: Access key ID.
            secret_key: Secret access key.
            secure: Use HTTPS.
            region: Bucket region, needed for S3.
        """
        self._client = Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            region=region,
        )
        self._endpoint = endpoint

    async def _run(self, fn: Callable[..., R], *args: Any, **kwargs: Any) -> R:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(fn, *args, **kwargs))

    async def upload(
        self,
        bucket: str,
        path: str,
        data: BinaryIO,
        content_type: str = "application/octet-stream",
    ) -> StoredObject:
        """Stream a file handle into the bucket."""
        length = _payload_length(data)
        result = await self._run(
            self._client.put_object,
            bucket,
            path,
            data,
            length,
            content_type=content_type,
        )
        return StoredObject(
            bucket=bucket,
            path=path,
            size_bytes=length,
            content_type=content_type,
            etag=result.etag or "",
        )

    async def delete(self, bucket: str, path: str) -> bool:
        """Remove an object; False when it was not there."""

        def _remove() -> bool:
            # remove_object succeeds silently on absent keys
            try:
                self._client.stat_object(bucket, path)
            except S3Error as e:
                if e.code in _MISSING_CODES:
                    return False
                raise
            self._client.remove_object(bucket, path)
            return True

        return await self._run(_remove)

    async def create_bucket(self, bucket: str) -> bool:
        """Create a bucket unless it exists."""

        def _create() -> bool:
            if self._client.bucket_exists(bucket):
                return False
            self._client.make_bucket(bucket)
            return True

        return await self._run(_create)

    async def bucket_exists(self, bucket: str) -> bool:
        """Check if a bucket exists."""
        return await self._run(self._client.bucket_exists, bucket)

    async def health_check(self) -> HealthStatus:
        """Check reachability by listing buckets."""
        start = time.perf_counter()
        try:
            buckets = await self._run(self._client.list_buckets)
        except Exception as e:
            return HealthStatus(
                healthy=False,
                latency_ms=(time.perf_counter() - start) * 1000,
                message=f"Object storage health check failed: {e}",
                details={"endpoint": self._endpoint, "error": str(e)},
            )
        return HealthStatus(
            healthy=True,
            latency_ms=(time.perf_counter() - start) * 1000,
            message="Object storage is healthy",
            details={"endpoint": self._endpoint, "buckets": str(len(buckets))},
        )
