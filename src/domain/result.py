"""Tagged results returned by the catalog services."""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, ParamSpec, TypeVar

from src.commons.telemetry.logger import get_logger
from src.domain.exceptions import DomainException, ServerException

T = TypeVar("T")
P = ParamSpec("P")

logger = get_logger(__name__)


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful outcome carrying the payload."""

    value: T
    message: str = ""
    status_code: int = 200

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Failed outcome carrying exactly one domain error."""

    error: DomainException

    @property
    def ok(self) -> bool:
        return False

    @property
    def status_code(self) -> int:
        return self.error.status_code

    @property
    def message(self) -> str:
        return self.error.message


Result = Success[T] | Failure


def returns_result(
    fn: Callable[P, Awaitable[Success[T]]],
) -> Callable[P, Awaitable[Success[T] | Failure]]:
    """Convert exceptions raised by a service coroutine into a Failure.

    Domain errors are passed through as-is. Anything else is logged with
    its traceback and reported as a ServerException.
    """

    @functools.wraps(fn)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> Success[T] | Failure:
        try:
            return await fn(*args, **kwargs)
        except DomainException as e:
            logger.warning(
                f"{fn.__qualname__} failed: {e.message}",
                extra={"error_kind": e.kind.value, "status_code": e.status_code},
            )
            return Failure(e)
        except Exception as e:
            logger.exception(f"Unexpected error in {fn.__qualname__}")
            return Failure(
                ServerException(
                    f"something went wrong in {fn.__name__}",
                    errors=[repr(e)],
                )
            )

    return wrapper
