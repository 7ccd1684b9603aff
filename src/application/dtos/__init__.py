"""Data transfer objects for the application layer."""

from src.application.dtos.envelope import ApiErrorResponse, ApiResponse, render
from src.application.dtos.videos import (
    ListVideosQuery,
    PublishVideoRequest,
    SortType,
    UpdateVideoRequest,
)

__all__ = [
    # Requests
    "ListVideosQuery",
    "PublishVideoRequest",
    "UpdateVideoRequest",
    "SortType",
    # Envelopes
    "ApiResponse",
    "ApiErrorResponse",
    "render",
]
