"""Object storage abstractions and implementations."""

from src.commons.infrastructure.blob.base import (
    BlobStorageBase,
    HealthStatus,
    StoredObject,
)
from src.commons.infrastructure.blob.minio_provider import MinioBlobStorage

__all__ = [
    # Base classes
    "BlobStorageBase",
    "HealthStatus",
    "StoredObject",
    # Implementations
    "MinioBlobStorage",
]
