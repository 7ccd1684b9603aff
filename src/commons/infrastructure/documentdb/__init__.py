"""Document database abstractions and implementations."""

from src.commons.infrastructure.documentdb.base import DocumentDBBase, IndexKey
from src.commons.infrastructure.documentdb.mongodb_provider import (
    MongoDBDocumentDB,
    normalize_document,
)

__all__ = [
    # Base classes
    "DocumentDBBase",
    "IndexKey",
    # Implementations
    "MongoDBDocumentDB",
    "normalize_document",
]
