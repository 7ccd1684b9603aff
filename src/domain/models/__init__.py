"""Domain models."""

from src.domain.models.video import (
    OwnerProfile,
    OwnerSummary,
    PagedResult,
    Video,
    VideoDetail,
    VideoFields,
    VideoSummary,
)

__all__ = [
    "Video",
    "VideoFields",
    "VideoSummary",
    "VideoDetail",
    "OwnerSummary",
    "OwnerProfile",
    "PagedResult",
]
