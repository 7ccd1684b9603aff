"""Telemetry decorators for timing and exception logging."""

import functools
import inspect
import logging
import time
from collections.abc import Callable
from contextvars import Token
from typing import Any, ParamSpec, TypeVar, overload

from src.commons.telemetry.logger import get_log_context, get_logger, log_context_var

P = ParamSpec("P")
R = TypeVar("R")

# Called with the exception (or None on success) once the wrapped call ends
_OnExit = Callable[[BaseException | None], None]


def _instrument(
    fn: Callable[P, R],
    on_enter: Callable[[], _OnExit],
) -> Callable[P, R]:
    """Wrap a sync or async callable so ``on_enter`` sees every call."""

    @functools.wraps(fn)
    def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        on_exit = on_enter()
        try:
            result = fn(*args, **kwargs)
        except Exception as e:
            on_exit(e)
            raise
        on_exit(None)
        return result

    @functools.wraps(fn)
    async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        on_exit = on_enter()
        try:
            result = await fn(*args, **kwargs)  # type: ignore[misc]
        except Exception as e:
            on_exit(e)
            raise
        on_exit(None)
        return result  # type: ignore[no-any-return]

    if inspect.iscoroutinefunction(fn):
        return async_wrapper  # type: ignore[return-value]
    return sync_wrapper


@overload
def log_exceptions(
    func: Callable[P, R],
) -> Callable[P, R]: ...


@overload
def log_exceptions(
    *,
    logger: logging.Logger | None = None,
    level: int = logging.ERROR,
    message: str | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]: ...


def log_exceptions(
    func: Callable[P, R] | None = None,
    *,
    logger: logging.Logger | None = None,
    level: int = logging.ERROR,
    message: str | None = None,
) -> Callable[P, R] | Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator that logs an exception with its traceback and re-raises it.

    Args:
        func: The function to decorate (when used without parentheses).
        logger: Optional logger instance.
        level: Log level for exceptions.
        message: Optional custom message.

    Returns:
        Decorated function.
    """

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        log = logger or get_logger(fn.__module__)

        def on_enter() -> _OnExit:
            def on_exit(error: BaseException | None) -> None:
                if error is None:
                    return
                log.log(
                    level,
                    message or f"Exception in {fn.__qualname__}",
                    exc_info=error,
                    extra={"exception_type": type(error).__name__},
                )

            return on_exit

        return _instrument(fn, on_enter)

    if func is not None:
        return decorator(func)
    return decorator


@overload
def timed(
    func: Callable[P, R],
) -> Callable[P, R]: ...


@overload
def timed(
    *,
    logger: logging.Logger | None = None,
    level: int = logging.DEBUG,
    threshold_ms: float | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]: ...


def timed(
    func: Callable[P, R] | None = None,
    *,
    logger: logging.Logger | None = None,
    level: int = logging.DEBUG,
    threshold_ms: float | None = None,
) -> Callable[P, R] | Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator to measure and log how long a call took.

    The log line carries ``duration_ms`` and ``outcome`` ("ok" or the
    exception class name).

    Args:
        func: The function to decorate (when used without parentheses).
        logger: Optional logger instance.
        level: Log level for timing messages.
        threshold_ms: Only log calls slower than this many milliseconds.

    Returns:
        Decorated function.
    """

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        log = logger or get_logger(fn.__module__)

        def on_enter() -> _OnExit:
            start = time.perf_counter()

            def on_exit(error: BaseException | None) -> None:
                elapsed_ms = (time.perf_counter() - start) * 1000
                if threshold_ms is not None and elapsed_ms < threshold_ms:
                    return
                log.log(
                    level,
                    f"{fn.__qualname__} finished",
                    extra={
                        "duration_ms": round(elapsed_ms, 2),
                        "outcome": "ok" if error is None else type(error).__name__,
                    },
                )

            return on_exit

        return _instrument(fn, on_enter)

    if func is not None:
        return decorator(func)
    return decorator


class LogContext:
    """Context manager binding temporary logging context (e.g. video_id)."""

    def __init__(self, **kwargs: Any) -> None:
        self.context = kwargs
        self._token: Token[dict[str, Any]] | None = None

    def __enter__(self) -> "LogContext":
        self._token = log_context_var.set({**get_log_context(), **self.context})
        return self

    def __exit__(self, *args: Any) -> None:
        if self._token is not None:
            log_context_var.reset(self._token)
            self._token = None
