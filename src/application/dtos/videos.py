"""DTOs for catalog read and mutation operations."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.infrastructure.media.base import LocalMedia


class SortType(str, Enum):
    """Sort direction accepted by the listing."""

    ASC = "asc"
    DESC = "desc"

    @property
    def direction(self) -> int:
        """Direction as a store sort value (1 or -1)."""
        return 1 if self is SortType.ASC else -1


class ListVideosQuery(BaseModel):
    """Raw listing parameters as received from the caller.

    Values are kept loose on purpose: invalid page/limit fall back to the
    configured defaults instead of failing the request.
    """

    query: str = ""
    sort_by: str | None = None
    sort_type: str | None = None
    user_id: str | None = None
    page: Any = None
    limit: Any = None


class PublishVideoRequest(BaseModel):
    """Input for publishing a new video."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    title: str | None = None
    description: str | None = None
    is_published: bool = True
    video: LocalMedia | None = Field(default=None, description="Local video payload")
    thumbnail: LocalMedia | None = Field(
        default=None,
        description="Local thumbnail payload",
    )


class UpdateVideoRequest(BaseModel):
    """Input for editing an existing video. Absent fields keep their value."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    title: str | None = None
    description: str | None = None
    thumbnail: LocalMedia | None = Field(
        default=None,
        description="Replacement thumbnail payload",
    )

    @property
    def is_empty(self) -> bool:
        """True when nothing at all was supplied."""
        return self.title is None and self.description is None and not self.thumbnail
