"""Application services for the video catalog."""

from src.application.services.catalog import CatalogRepository, Revision
from src.application.services.lifecycle import VideoLifecycleService
from src.application.services.pipeline import (
    ListingSpec,
    PipelineBuilder,
    build_detail_pipeline,
    build_listing_pipeline,
)
from src.application.services.query import VideoQueryService
from src.application.services.saga import Compensations

__all__ = [
    "CatalogRepository",
    "Compensations",
    "ListingSpec",
    "PipelineBuilder",
    "Revision",
    "VideoLifecycleService",
    "VideoQueryService",
    "build_detail_pipeline",
    "build_listing_pipeline",
]
