"""Video catalog domain models."""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _stringify_id(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    return value


class CatalogModel(BaseModel):
    """Base for catalog models.

    Documents are stored and rendered with camelCase keys; Python code
    uses snake_case attribute names.
    """

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Dump as a JSON-compatible dict using the camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class VideoFields(CatalogModel):
    """Stored fields shared by every video representation."""

    id: str = Field(description="Document id (24-hex ObjectId)")
    video_file: str = Field(alias="videoFile", description="Video blob reference")
    thumbnail: str = Field(description="Thumbnail blob reference")
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    duration: float = Field(ge=0, description="Media duration in seconds")
    views: int = Field(default=0, ge=0)
    is_published: bool = Field(default=True, alias="isPublished")
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utcnow, alias="updatedAt")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        return _stringify_id(v)


class Video(VideoFields):
    """Core entity representing a catalog video as stored.

    The owner reference is assigned once at creation and never changes.
    """

    owner: str = Field(description="Owning user id")

    @field_validator("owner", mode="before")
    @classmethod
    def _coerce_owner(cls, v: Any) -> Any:
        return _stringify_id(v)

    @classmethod
    def new(
        cls,
        *,
        title: str,
        description: str,
        video_file: str,
        thumbnail: str,
        duration: float,
        owner: str,
        is_published: bool = True,
    ) -> dict[str, Any]:
        """Build the insert document for a freshly published video.

        Returns a raw document rather than a model because the id is
        assigned by the store.
        """
        now = _utcnow()
        return {
            "title": title,
            "description": description,
            "videoFile": video_file,
            "thumbnail": thumbnail,
            "duration": duration,
            "views": 0,
            "isPublished": is_published,
            "owner": ObjectId(owner),
            "createdAt": now,
            "updatedAt": now,
        }


class OwnerSummary(CatalogModel):
    """Owner fields projected into listing results."""

    id: str
    username: str = ""
    full_name: str = Field(default="", alias="fullName")
    avatar: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        return _stringify_id(v)


class OwnerProfile(OwnerSummary):
    """Owner fields plus viewer-relative subscription data."""

    subscribers_count: int = Field(default=0, ge=0, alias="subscribersCount")
    is_subscribed: bool = Field(default=False, alias="isSubscribed")


class VideoSummary(VideoFields):
    """Listing read model: video joined to its owner."""

    owner: OwnerSummary | None = None
    score: float | None = Field(
        default=None,
        description="Text relevance rank, present only for text searches",
    )


class VideoDetail(VideoFields):
    """Single-video read model with like and subscription enrichment."""

    owner: OwnerProfile | None = None
    total_likes: int = Field(default=0, ge=0, alias="totalLikes")
    is_liked: bool = Field(default=False, alias="isLiked")


T = TypeVar("T", bound=BaseModel)


class PagedResult(CatalogModel, Generic[T]):
    """One page of a paginated listing."""

    docs: list[T] = Field(default_factory=list)
    total_docs: int = Field(ge=0, alias="totalDocs")
    limit: int = Field(ge=1)
    page: int = Field(ge=1)
    total_pages: int = Field(ge=0, alias="totalPages")
    paging_counter: int = Field(ge=0, alias="pagingCounter")
    has_prev_page: bool = Field(alias="hasPrevPage")
    has_next_page: bool = Field(alias="hasNextPage")
    prev_page: int | None = Field(default=None, alias="prevPage")
    next_page: int | None = Field(default=None, alias="nextPage")

    @classmethod
    def build(
        cls,
        docs: list[T],
        *,
        total_docs: int,
        page: int,
        limit: int,
    ) -> PagedResult[T]:
        """Compute page metadata for a slice of results.

        Args:
            docs: Items on the requested page.
            total_docs: Number of items matching the query across all pages.
            page: 1-based page number that was requested.
            limit: Page size.

        Returns:
            A populated PagedResult.
        """
        total_pages = math.ceil(total_docs / limit) if total_docs else 0
        has_prev = page > 1
        has_next = page < total_pages
        return cls(
            docs=docs,
            total_docs=total_docs,
            limit=limit,
            page=page,
            total_pages=total_pages,
            paging_counter=(page - 1) * limit + 1,
            has_prev_page=has_prev,
            has_next_page=has_next,
            prev_page=page - 1 if has_prev else None,
            next_page=page + 1 if has_next else None,
        )
