"""Media upload/delete adapter over blob storage."""

from src.infrastructure.media.base import (
    DurationProbeBase,
    LocalMedia,
    MediaKind,
    MediaStoreBase,
    MediaStoreError,
    UploadedMedia,
)
from src.infrastructure.media.blob_media_store import BlobMediaStore
from src.infrastructure.media.ffprobe import FFprobeDurationProbe

__all__ = [
    "DurationProbeBase",
    "LocalMedia",
    "MediaKind",
    "MediaStoreBase",
    "MediaStoreError",
    "UploadedMedia",
    "BlobMediaStore",
    "FFprobeDurationProbe",
]
