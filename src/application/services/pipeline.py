"""Aggregation pipeline builder for catalog read models.

Pipelines are plain lists of stage documents. Building them here, away
from the store, keeps the filter/join/rank/paginate logic testable as
data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Self

from bson import ObjectId

from src.commons.settings.models import DocumentCollectionSettings

Stage = dict[str, Any]

OWNER_SUMMARY_FIELDS = ("username", "fullName", "avatar")

# Wire name -> stored field. snake_case spellings are accepted too.
SORTABLE_FIELDS: dict[str, str] = {
    "createdAt": "createdAt",
    "created_at": "createdAt",
    "updatedAt": "updatedAt",
    "updated_at": "updatedAt",
    "views": "views",
    "duration": "duration",
    "title": "title",
}

DEFAULT_SORT: dict[str, int] = {"createdAt": -1, "_id": -1}


class PipelineBuilder:
    """Fluent builder for an ordered list of aggregation stages."""

    def __init__(self, stages: list[Stage] | None = None) -> None:
        self._stages: list[Stage] = list(stages or [])

    @property
    def stages(self) -> list[Stage]:
        """A copy of the stages built so far."""
        return list(self._stages)

    def stage(self, stage: Stage) -> Self:
        self._stages.append(stage)
        return self

    def match(self, predicate: dict[str, Any]) -> Self:
        return self.stage({"$match": predicate})

    def add_fields(self, **fields: Any) -> Self:
        return self.stage({"$addFields": fields})

    def lookup(
        self,
        *,
        from_: str,
        local_field: str,
        foreign_field: str,
        as_: str,
        pipeline: list[Stage] | None = None,
    ) -> Self:
        """Left outer join against another collection."""
        spec: dict[str, Any] = {
            "from": from_,
            "localField": local_field,
            "foreignField": foreign_field,
            "as": as_,
        }
        if pipeline:
            spec["pipeline"] = pipeline
        return self.stage({"$lookup": spec})

    def first_of(self, field: str) -> Self:
        """Collapse a joined array to its first element (absent if empty)."""
        return self.add_fields(**{field: {"$first": f"${field}"}})

    def sort(self, spec: dict[str, Any]) -> Self:
        return self.stage({"$sort": spec})

    def project(self, spec: dict[str, Any]) -> Self:
        return self.stage({"$project": spec})

    def paginate(self, page: int, limit: int) -> Self:
        """Split into one page of ``docs`` plus a ``total`` count."""
        return self.stage(
            {
                "$facet": {
                    "docs": [{"$skip": (page - 1) * limit}, {"$limit": limit}],
                    "total": [{"$count": "count"}],
                }
            }
        )

    def build(self) -> list[Stage]:
        return self.stages


@dataclass(frozen=True)
class ListingSpec:
    """Normalized listing parameters."""

    query: str = ""
    owner_id: str | None = None
    sort_field: str | None = None
    sort_direction: int = -1
    page: int = 1
    limit: int = 10

    @property
    def is_text_search(self) -> bool:
        return bool(self.query.strip())


def listing_filter(spec: ListingSpec) -> dict[str, Any]:
    """Filter stage predicate: published, optionally by owner and text."""
    predicate: dict[str, Any] = {"isPublished": True}
    if spec.owner_id:
        predicate["owner"] = ObjectId(spec.owner_id)
    if spec.is_text_search:
        predicate["$text"] = {"$search": spec.query.strip()}
    return predicate


def listing_sort(spec: ListingSpec) -> dict[str, Any]:
    """Ranking stage: relevance for text searches, else the caller's sort."""
    if spec.is_text_search:
        return {"score": -1, "views": -1, "_id": -1}
    if spec.sort_field:
        return {spec.sort_field: spec.sort_direction, "_id": spec.sort_direction}
    return dict(DEFAULT_SORT)


def owner_summary_lookup(users_collection: str) -> list[Stage]:
    """Join stages attaching the owner's public profile to each video."""
    return (
        PipelineBuilder()
        .lookup(
            from_=users_collection,
            local_field="owner",
            foreign_field="_id",
            as_="owner",
            pipeline=[{"$project": dict.fromkeys(OWNER_SUMMARY_FIELDS, 1)}],
        )
        .first_of("owner")
        .build()
    )


def build_listing_pipeline(
    spec: ListingSpec,
    collections: DocumentCollectionSettings,
) -> list[Stage]:
    """Filter, join, rank and paginate published videos."""
    builder = PipelineBuilder().match(listing_filter(spec))
    if spec.is_text_search:
        builder.add_fields(score={"$meta": "textScore"})
    for stage in owner_summary_lookup(collections.users):
        builder.stage(stage)
    return builder.sort(listing_sort(spec)).paginate(spec.page, spec.limit).build()


def _viewer_in(viewer_id: str | None, array_expr: str) -> Any:
    """Membership test that is constant false for an absent viewer."""
    if viewer_id is None:
        return {"$literal": False}
    return {"$in": [ObjectId(viewer_id), {"$ifNull": [array_expr, []]}]}


def build_detail_pipeline(
    video_id: str,
    viewer_id: str | None,
    collections: DocumentCollectionSettings,
) -> list[Stage]:
    """Single video with like totals, owner profile and viewer flags."""
    owner_pipeline = (
        PipelineBuilder()
        .lookup(
            from_=collections.subscriptions,
            local_field="_id",
            foreign_field="channel",
            as_="subscribers",
        )
        .add_fields(
            subscribersCount={"$size": "$subscribers"},
            isSubscribed=_viewer_in(viewer_id, "$subscribers.subscriber"),
        )
        .project(
            {
                **dict.fromkeys(OWNER_SUMMARY_FIELDS, 1),
                "subscribersCount": 1,
                "isSubscribed": 1,
            }
        )
        .build()
    )

    return (
        PipelineBuilder()
        .match({"_id": ObjectId(video_id)})
        .lookup(
            from_=collections.likes,
            local_field="_id",
            foreign_field="video",
            as_="likes",
        )
        .lookup(
            from_=collections.users,
            local_field="owner",
            foreign_field="_id",
            as_="owner",
            pipeline=owner_pipeline,
        )
        .add_fields(
            owner={"$first": "$owner"},
            totalLikes={"$size": "$likes"},
            isLiked=_viewer_in(viewer_id, "$likes.likedBy"),
        )
        .project({"likes": 0})
        .build()
    )
