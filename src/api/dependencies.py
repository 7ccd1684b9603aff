"""FastAPI dependency injection for services, settings and caller identity."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from src.application.services.catalog import CatalogRepository
from src.application.services.lifecycle import VideoLifecycleService
from src.application.services.query import VideoQueryService
from src.commons.settings.loader import get_settings as _load_settings
from src.commons.settings.models import Settings
from src.commons.telemetry import get_logger
from src.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)

logger = get_logger(__name__)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Application settings loaded from config files and environment.
    """
    return _load_settings()


def get_infrastructure_factory(
    settings: Annotated[Settings, Depends(get_settings)],
) -> InfrastructureFactory:
    """Get infrastructure factory with all providers.

    Args:
        settings: Application settings.

    Returns:
        Configured infrastructure factory.
    """
    return get_factory(settings)


def get_catalog_repository(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CatalogRepository:
    """Get the catalog repository bound to the configured document store."""
    return CatalogRepository(
        document_db=factory.get_document_db(),
        collections=settings.document_db.collections,
    )


def get_query_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> VideoQueryService:
    """Get video query service with all dependencies.

    Args:
        factory: Infrastructure factory.
        settings: Application settings.

    Returns:
        Configured video query service.
    """
    return VideoQueryService(
        document_db=factory.get_document_db(),
        collections=settings.document_db.collections,
        pagination=settings.pagination,
    )


def get_lifecycle_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    repository: Annotated[CatalogRepository, Depends(get_catalog_repository)],
) -> VideoLifecycleService:
    """Get video lifecycle service with all dependencies.

    Args:
        factory: Infrastructure factory.
        repository: Catalog repository.

    Returns:
        Configured video lifecycle service.
    """
    return VideoLifecycleService(
        repository=repository,
        media_store=factory.get_media_store(),
    )


def get_caller_id(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> str | None:
    """Caller identity as forwarded by the upstream auth layer, if any."""
    raw = request.headers.get(settings.server.identity_header)
    if raw is None:
        return None
    return raw.strip() or None


# Type aliases for cleaner route signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]
FactoryDep = Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)]
QueryServiceDep = Annotated[VideoQueryService, Depends(get_query_service)]
LifecycleServiceDep = Annotated[VideoLifecycleService, Depends(get_lifecycle_service)]
CallerIdDep = Annotated[str | None, Depends(get_caller_id)]


async def init_services(settings: Settings) -> None:
    """Initialize all infrastructure services on startup.

    Creates the catalog indexes and the blob buckets so the first
    request does not pay for it.

    Args:
        settings: Application settings.
    """
    factory = get_factory(settings)

    factory.get_blob_storage()
    document_db = factory.get_document_db()

    repository = CatalogRepository(
        document_db=document_db,
        collections=settings.document_db.collections,
    )
    await repository.ensure_indexes()

    media_store = factory.get_media_store()
    ensure_buckets = getattr(media_store, "ensure_buckets_exist", None)
    if ensure_buckets is not None:
        await ensure_buckets()

    logger.info("Services initialized", extra={"environment": settings.app.environment})


async def shutdown_services() -> None:
    """Shutdown all infrastructure services."""
    try:
        factory = get_factory()
        await factory.close_all()
    except ValueError:
        pass  # Factory not initialized
    finally:
        reset_factory()
        get_settings.cache_clear()
