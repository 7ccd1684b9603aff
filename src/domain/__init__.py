"""Domain layer - catalog models, errors and results."""

from src.domain.exceptions import (
    DomainException,
    ErrorKind,
    PersistenceException,
    ServerException,
    UpstreamDeleteException,
    UpstreamUploadException,
    ValidationException,
    VideoNotFoundException,
)
from src.domain.models import (
    OwnerProfile,
    OwnerSummary,
    PagedResult,
    Video,
    VideoDetail,
    VideoFields,
    VideoSummary,
)
from src.domain.value_objects import DocumentId

__all__ = [
    # Exceptions
    "DomainException",
    "ErrorKind",
    "ValidationException",
    "VideoNotFoundException",
    "UpstreamUploadException",
    "UpstreamDeleteException",
    "PersistenceException",
    "ServerException",
    # Models
    "Video",
    "VideoFields",
    "VideoSummary",
    "VideoDetail",
    "OwnerSummary",
    "OwnerProfile",
    "PagedResult",
    # Value Objects
    "DocumentId",
]
