"""Document ID value object."""

from __future__ import annotations

import re
from typing import Annotated

from pydantic import BaseModel, Field, field_validator

from src.domain.exceptions import ValidationException

# MongoDB ObjectId: 12 bytes rendered as 24 hex characters
OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


class DocumentId(BaseModel):
    """Value object representing a validated document identifier.

    Ids arrive as strings from path parameters, headers and query strings.
    They are checked here so that malformed input is rejected before any
    store round-trip.

    Examples:
        >>> DocumentId.parse("65a1f0c2e4b0a1b2c3d4e5f6").value
        '65a1f0c2e4b0a1b2c3d4e5f6'
    """

    value: Annotated[
        str,
        Field(min_length=24, max_length=24, description="24-hex ObjectId string"),
    ]

    @field_validator("value")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate that the value is a 24 character hex string."""
        if not OBJECT_ID_PATTERN.match(v):
            msg = f"Invalid document id format: '{v}'"
            raise ValueError(msg)
        return v.lower()

    @classmethod
    def parse(cls, raw: str | None, field: str = "id") -> DocumentId:
        """Parse a raw id, raising a domain validation error on failure.

        Args:
            raw: Raw identifier string.
            field: Name of the input field, used in the error message.

        Returns:
            A DocumentId instance.

        Raises:
            ValidationException: If the id is missing or malformed.
        """
        if not raw or not isinstance(raw, str):
            raise ValidationException(f"{field} is required")
        raw = raw.strip()
        if not OBJECT_ID_PATTERN.match(raw):
            raise ValidationException(
                f"{field} is not a valid id",
                errors=[f"{field}={raw!r}"],
            )
        return cls(value=raw)

    @classmethod
    def parse_optional(cls, raw: str | None, field: str = "id") -> DocumentId | None:
        """Parse an id that may legitimately be absent."""
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return None
        return cls.parse(raw, field)

    def __str__(self) -> str:
        return self.value

    def __hash__(self) -> int:
        return hash(self.value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DocumentId):
            return self.value == other.value
        if isinstance(other, str):
            return self.value == other.lower()
        return False
