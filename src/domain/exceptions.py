"""Domain exceptions for the video catalog."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories surfaced to callers."""

    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    UPSTREAM_UPLOAD = "upstream_upload_failure"
    UPSTREAM_DELETE = "upstream_delete_failure"
    PERSISTENCE = "persistence_failure"
    SERVER = "server_error"


class DomainException(Exception):
    """Base exception for domain errors.

    Every subclass carries an HTTP-style status code and a list of
    detail strings so that outer layers can render the error envelope
    without knowing the concrete type.
    """

    kind: ErrorKind = ErrorKind.SERVER
    status_code: int = 500

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.message = message
        self.errors = list(errors or [])
        super().__init__(message)


class ValidationException(DomainException):
    """Raised when caller input is missing, empty or malformed."""

    kind = ErrorKind.VALIDATION
    status_code = 400


class VideoNotFoundException(DomainException):
    """Raised when a requested video is not found."""

    kind = ErrorKind.NOT_FOUND
    status_code = 404

    def __init__(self, video_id: str) -> None:
        self.video_id = video_id
        super().__init__(f"video with the id {video_id} is not found")


class UpstreamUploadException(DomainException):
    """Raised when the blob store rejects or fails an upload."""

    kind = ErrorKind.UPSTREAM_UPLOAD
    status_code = 502

    def __init__(self, asset: str, reason: str) -> None:
        self.asset = asset
        self.reason = reason
        super().__init__(f"{asset} upload failed", errors=[reason])


class UpstreamDeleteException(DomainException):
    """Raised when the blob store fails to delete a reference."""

    kind = ErrorKind.UPSTREAM_DELETE
    status_code = 502

    def __init__(
        self,
        message: str,
        references: list[str],
        reason: str | None = None,
    ) -> None:
        self.references = list(references)
        self.reason = reason
        errors = [f"undeleted blob: {ref}" for ref in references]
        if reason:
            errors.append(reason)
        super().__init__(message, errors=errors)


class PersistenceException(DomainException):
    """Raised when the document store returns no result for a write."""

    kind = ErrorKind.PERSISTENCE
    status_code = 500


class ServerException(DomainException):
    """Raised when a read pipeline or an unexpected dependency call fails."""

    kind = ErrorKind.SERVER
    status_code = 500
