"""Uniform response envelopes consumed by the HTTP layer."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.domain.exceptions import DomainException
from src.domain.result import Failure, Success


def _to_wire(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [_to_wire(v) for v in value]
    if value is None:
        return {}
    return value


class ApiResponse(BaseModel):
    """Success envelope: ``{statusCode, data, message}``."""

    model_config = ConfigDict(populate_by_name=True)

    status_code: int = Field(alias="statusCode")
    data: Any = None
    message: str = "Success"

    @classmethod
    def from_success(cls, result: Success[Any]) -> "ApiResponse":
        return cls(
            status_code=result.status_code,
            data=_to_wire(result.value),
            message=result.message or "Success",
        )


class ApiErrorResponse(BaseModel):
    """Error envelope: ``{statusCode, message, errors}``."""

    model_config = ConfigDict(populate_by_name=True)

    status_code: int = Field(alias="statusCode")
    message: str = "Something went wrong"
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def from_exception(cls, exc: DomainException) -> "ApiErrorResponse":
        return cls(status_code=exc.status_code, message=exc.message, errors=exc.errors)

    @classmethod
    def from_failure(cls, result: Failure) -> "ApiErrorResponse":
        return cls.from_exception(result.error)


def render(result: Success[Any] | Failure) -> tuple[int, dict[str, Any]]:
    """Turn a service result into (HTTP status, envelope body)."""
    if isinstance(result, Success):
        body = ApiResponse.from_success(result)
    else:
        body = ApiErrorResponse.from_failure(result)
    return body.status_code, body.model_dump(by_alias=True)
