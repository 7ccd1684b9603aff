"""Domain value objects."""

from src.domain.value_objects.document_id import DocumentId

__all__ = [
    "DocumentId",
]
