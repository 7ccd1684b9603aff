"""Catalog read service: listings and enriched single-video views."""

from typing import Any

from src.application.dtos.videos import ListVideosQuery, SortType
from src.application.services.pipeline import (
    SORTABLE_FIELDS,
    ListingSpec,
    build_detail_pipeline,
    build_listing_pipeline,
)
from src.commons.infrastructure.documentdb.base import DocumentDBBase
from src.commons.settings.models import DocumentCollectionSettings, PaginationSettings
from src.commons.telemetry import get_logger, timed
from src.domain.exceptions import (
    ServerException,
    ValidationException,
    VideoNotFoundException,
)
from src.domain.models.video import PagedResult, VideoDetail, VideoSummary
from src.domain.result import Success, returns_result
from src.domain.value_objects import DocumentId


def coerce_positive_int(value: Any, default: int) -> int:
    """Parse a 1-based integer, falling back to ``default`` when invalid."""
    if isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


class VideoQueryService:
    """Runs the listing and detail aggregation pipelines.

    Both operations are read-only. Viewer identity is passed explicitly
    on every call; an absent viewer is treated as "not liked / not
    subscribed".
    """

    def __init__(
        self,
        document_db: DocumentDBBase,
        collections: DocumentCollectionSettings,
        pagination: PaginationSettings,
    ) -> None:
        """Initialize query service.

        Args:
            document_db: Document database provider.
            collections: Collection names for videos and related entities.
            pagination: Page/limit defaults and the maximum page size.
        """
        self._doc_db = document_db
        self._collections = collections
        self._pagination = pagination
        self._logger = get_logger(__name__)

    def normalize_listing(self, params: ListVideosQuery) -> ListingSpec:
        """Validate and default raw listing parameters.

        Raises:
            ValidationException: For an unknown sort field/direction or a
                malformed owner id.
        """
        page = coerce_positive_int(params.page, self._pagination.default_page)
        limit = coerce_positive_int(params.limit, self._pagination.default_limit)
        limit = min(limit, self._pagination.max_limit)

        owner = DocumentId.parse_optional(params.user_id, field="userId")

        sort_field: str | None = None
        if params.sort_by:
            sort_field = SORTABLE_FIELDS.get(params.sort_by.strip())
            if sort_field is None:
                raise ValidationException(
                    f"cannot sort by '{params.sort_by}'",
                    errors=[f"sortBy must be one of {sorted(set(SORTABLE_FIELDS))}"],
                )

        direction = SortType.DESC
        if params.sort_type:
            try:
                direction = SortType(params.sort_type.strip().lower())
            except ValueError as e:
                raise ValidationException(
                    f"invalid sortType '{params.sort_type}'",
                    errors=["sortType must be 'asc' or 'desc'"],
                ) from e

        return ListingSpec(
            query=(params.query or "").strip(),
            owner_id=owner.value if owner else None,
            sort_field=sort_field,
            sort_direction=direction.direction,
            page=page,
            limit=limit,
        )

    @returns_result
    @timed
    async def list_videos(
        self,
        params: ListVideosQuery,
    ) -> Success[PagedResult[VideoSummary]]:
        """List published videos with search, sort and pagination.

        An empty page is a successful result.
        """
        listing = self.normalize_listing(params)
        pipeline = build_listing_pipeline(listing, self._collections)

        self._logger.debug(
            "Listing videos",
            extra={
                "text_search": listing.is_text_search,
                "owner_id": listing.owner_id,
                "sort_field": listing.sort_field,
                "page": listing.page,
                "limit": listing.limit,
            },
        )

        try:
            rows = await self._doc_db.aggregate(self._collections.videos, pipeline)
        except Exception as e:
            raise ServerException(
                "something went wrong while getting all videos",
                errors=[str(e)],
            ) from e

        facet = rows[0] if rows else {}
        total_rows = facet.get("total") or []
        total_docs = int(total_rows[0]["count"]) if total_rows else 0
        docs = [VideoSummary(**doc) for doc in facet.get("docs", [])]

        page = PagedResult[VideoSummary].build(
            docs,
            total_docs=total_docs,
            page=listing.page,
            limit=listing.limit,
        )
        self._logger.debug(
            "Videos listed",
            extra={"count": len(docs), "total_docs": total_docs},
        )
        return Success(page, message="get all videos successfully")

    @returns_result
    @timed
    async def get_video_detail(
        self,
        video_id: str,
        viewer_id: str | None = None,
    ) -> Success[VideoDetail]:
        """Fetch one video enriched with likes, owner and viewer flags."""
        vid = DocumentId.parse(video_id, field="videoId")
        viewer = DocumentId.parse_optional(viewer_id, field="viewerId")

        pipeline = build_detail_pipeline(
            vid.value,
            viewer.value if viewer else None,
            self._collections,
        )

        try:
            rows = await self._doc_db.aggregate(self._collections.videos, pipeline)
        except Exception as e:
            raise ServerException(
                "something went wrong while getting the video",
                errors=[str(e)],
            ) from e

        if not rows:
            raise VideoNotFoundException(vid.value)

        return Success(VideoDetail(**rows[0]), message="Video get successfully")
