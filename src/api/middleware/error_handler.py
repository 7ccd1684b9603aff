"""Error handling middleware and exception handlers.

Every error leaves the service as ``{statusCode, message, errors}``.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from src.application.dtos.envelope import ApiErrorResponse
from src.commons.telemetry.logger import get_logger
from src.domain.exceptions import DomainException

logger = get_logger(__name__)


def _build_error_response(
    request: Request,
    status_code: int,
    message: str,
    errors: list[str] | None = None,
) -> JSONResponse:
    """Build the error envelope response.

    Args:
        request: HTTP request.
        status_code: HTTP status code.
        message: Human-readable error message.
        errors: Detail strings.

    Returns:
        JSON error response.
    """
    body = ApiErrorResponse(
        status_code=status_code,
        message=message,
        errors=errors or [],
    )
    response = JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True),
    )
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers["X-Request-ID"] = request_id
    return response


def _handle_exception(request: Request, exc: Exception) -> JSONResponse:
    """Map an exception that escaped a route to the error envelope."""
    if isinstance(exc, DomainException):
        logger.warning(
            f"Domain error: {exc.message}",
            extra={"error_kind": exc.kind.value, "status_code": exc.status_code},
        )
        return _build_error_response(
            request=request,
            status_code=exc.status_code,
            message=exc.message,
            errors=exc.errors,
        )

    logger.exception(f"Unexpected error: {exc}")
    return _build_error_response(
        request=request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="Something went wrong",
    )


async def _domain_exception_handler(request: Request, exc: Exception) -> Response:
    return _handle_exception(request, exc)


async def _validation_exception_handler(
    request: Request,
    exc: Exception,
) -> Response:
    errors: list[str] = []
    if isinstance(exc, RequestValidationError):
        for err in exc.errors():
            location = ".".join(str(part) for part in err.get("loc", ()))
            errors.append(f"{location}: {err.get('msg', 'invalid value')}")
    logger.warning("Request validation failed", extra={"errors": errors})
    return _build_error_response(
        request=request,
        status_code=status.HTTP_400_BAD_REQUEST,
        message="invalid request",
        errors=errors,
    )


async def _http_exception_handler(request: Request, exc: Exception) -> Response:
    status_code = getattr(exc, "status_code", status.HTTP_500_INTERNAL_SERVER_ERROR)
    detail = getattr(exc, "detail", None)
    return _build_error_response(
        request=request,
        status_code=status_code,
        message=str(detail) if detail else "Something went wrong",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Render framework and domain errors with the error envelope."""
    app.add_exception_handler(DomainException, _domain_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)


async def error_handler_middleware(
    request: Request,
    call_next: RequestResponseEndpoint,
) -> Response:
    """Middleware to catch and format all exceptions.

    Args:
        request: HTTP request.
        call_next: Next handler in chain.

    Returns:
        HTTP response.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        return _handle_exception(request, exc)
