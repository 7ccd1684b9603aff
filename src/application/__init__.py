"""Application layer - use cases and orchestration.

This layer contains:
- Services: catalog reads, lifecycle mutations and persistence
- DTOs: request objects and response envelopes for API boundaries
"""

from src.application.dtos import (
    ApiErrorResponse,
    ApiResponse,
    ListVideosQuery,
    PublishVideoRequest,
    UpdateVideoRequest,
)
from src.application.services import (
    CatalogRepository,
    VideoLifecycleService,
    VideoQueryService,
)

__all__ = [
    # DTOs
    "ListVideosQuery",
    "PublishVideoRequest",
    "UpdateVideoRequest",
    "ApiResponse",
    "ApiErrorResponse",
    # Services
    "CatalogRepository",
    "VideoLifecycleService",
    "VideoQueryService",
]
