"""Request logging middleware."""

import logging
import time
from collections.abc import Callable
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from src.commons.telemetry.logger import (
    clear_log_context,
    get_logger,
    set_correlation_id,
    set_log_context,
)

logger = get_logger(__name__)


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request and binds request-scoped log context.

    The request id doubles as the correlation id, and the forwarded
    caller identity is bound as ``caller_id``, so every log line emitted
    while serving the request carries both.
    """

    def __init__(self, app: ASGIApp, identity_header: str = "X-User-Id") -> None:
        super().__init__(app)
        self.identity_header = identity_header

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Any],
    ) -> Response:
        """Process request with logging.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware/handler in chain.

        Returns:
            HTTP response.
        """
        request_id = set_correlation_id(request.headers.get("X-Request-ID"))
        request.state.request_id = request_id
        clear_log_context()
        caller_id = (request.headers.get(self.identity_header) or "").strip()
        if caller_id:
            set_log_context(caller_id=caller_id)

        start_time = time.perf_counter()
        logger.debug(
            "Request started",
            extra={
                "method": request.method,
                "path": request.url.path,
                "query": str(request.query_params),
                "client_ip": request.client.host if request.client else "unknown",
            },
        )

        response: Response = await call_next(request)

        logger.log(
            _level_for(response.status_code),
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
            },
        )

        response.headers["X-Request-ID"] = request_id
        return response
