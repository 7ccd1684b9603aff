"""Infrastructure factory for creating service instances from configuration."""

from typing import Any, cast

from src.commons.infrastructure.blob import BlobStorageBase, MinioBlobStorage
from src.commons.infrastructure.documentdb import DocumentDBBase, MongoDBDocumentDB
from src.commons.settings.models import DocumentDBSettings, Settings
from src.commons.telemetry import get_logger
from src.infrastructure.media import (
    BlobMediaStore,
    DurationProbeBase,
    FFprobeDurationProbe,
    MediaStoreBase,
)

logger = get_logger(__name__)


def build_mongo_uri(doc_settings: DocumentDBSettings) -> str:
    """Build a MongoDB connection string from settings."""
    if doc_settings.username and doc_settings.password:
        return (
            f"mongodb://{doc_settings.username}:{doc_settings.password}"
            f"@{doc_settings.host}:{doc_settings.port}"
            f"/?authSource={doc_settings.auth_source}"
        )
    return f"mongodb://{doc_settings.host}:{doc_settings.port}"


class InfrastructureFactory:
    """Factory for creating infrastructure service instances.

    Instances are created lazily and cached for the factory's lifetime.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._instances: dict[str, Any] = {}

    def get_blob_storage(self) -> BlobStorageBase:
        """Get blob storage instance."""
        if "blob_storage" not in self._instances:
            blob_settings = self._settings.blob_storage
            self._instances["blob_storage"] = MinioBlobStorage(
                endpoint=blob_settings.endpoint,
                access_key=blob_settings.access_key,
                secret_key=blob_settings.secret_key,
                secure=blob_settings.use_ssl,
                region=blob_settings.region,
            )
        return cast("BlobStorageBase", self._instances["blob_storage"])

    def get_document_db(self) -> DocumentDBBase:
        """Get document database instance."""
        if "document_db" not in self._instances:
            doc_settings = self._settings.document_db
            self._instances["document_db"] = MongoDBDocumentDB(
                connection_string=build_mongo_uri(doc_settings),
                database_name=doc_settings.database,
            )
        return cast("DocumentDBBase", self._instances["document_db"])

    def get_duration_probe(self) -> DurationProbeBase:
        """Get media duration probe instance."""
        if "duration_probe" not in self._instances:
            self._instances["duration_probe"] = FFprobeDurationProbe(
                ffprobe_path=self._settings.media.ffprobe_path,
            )
        return cast("DurationProbeBase", self._instances["duration_probe"])

    def get_media_store(self) -> MediaStoreBase:
        """Get the media store that uploads videos and thumbnails."""
        if "media_store" not in self._instances:
            self._instances["media_store"] = BlobMediaStore(
                blob_storage=self.get_blob_storage(),
                duration_probe=self.get_duration_probe(),
                blob_settings=self._settings.blob_storage,
                media_settings=self._settings.media,
            )
        return cast("MediaStoreBase", self._instances["media_store"])

    async def close_all(self) -> None:
        """Close all service connections."""
        for name, instance in self._instances.items():
            close = getattr(instance, "close", None)
            if close is None:
                continue
            try:
                close_result = close()
                if hasattr(close_result, "__await__"):
                    await close_result
            except Exception:
                logger.warning(f"Error closing {name}", exc_info=True)
        self._instances.clear()


class _FactoryHolder:
    """Holder for the factory singleton to avoid global statements."""

    instance: InfrastructureFactory | None = None


def get_factory(settings: Settings | None = None) -> InfrastructureFactory:
    """Get or create the infrastructure factory singleton.

    Args:
        settings: Settings to use. Required on first call.

    Raises:
        ValueError: If settings not provided on first call.
    """
    if _FactoryHolder.instance is None:
        if settings is None:
            raise ValueError("Settings required to initialize factory")
        _FactoryHolder.instance = InfrastructureFactory(settings)
    return _FactoryHolder.instance


def reset_factory() -> None:
    """Reset the factory singleton (for testing)."""
    _FactoryHolder.instance = None
