"""Infrastructure layer - external service implementations."""

from src.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)
from src.infrastructure.media import (
    BlobMediaStore,
    DurationProbeBase,
    FFprobeDurationProbe,
    LocalMedia,
    MediaKind,
    MediaStoreBase,
    MediaStoreError,
    UploadedMedia,
)

__all__ = [
    # Factory
    "InfrastructureFactory",
    "get_factory",
    "reset_factory",
    # Media
    "MediaStoreBase",
    "MediaStoreError",
    "MediaKind",
    "LocalMedia",
    "UploadedMedia",
    "BlobMediaStore",
    "DurationProbeBase",
    "FFprobeDurationProbe",
]
