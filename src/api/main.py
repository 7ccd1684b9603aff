"""FastAPI application factory and lifespan management."""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.dependencies import get_settings, init_services, shutdown_services
from src.api.middleware.error_handler import (
    error_handler_middleware,
    register_exception_handlers,
)
from src.api.middleware.logging import LoggingMiddleware
from src.api.openapi.routes import health, videos
from src.commons.settings.models import Settings
from src.commons.telemetry import JsonFormatter, TextFormatter, configure_logging

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _log_level(settings: Settings) -> int:
    name = settings.telemetry.log_level or settings.app.log_level
    return int(getattr(logging, name.upper()))


def _setup_logging(settings: Settings) -> None:
    """Send the application's own loggers through the configured formatter."""
    level = logging.getLevelName(_log_level(settings))
    configure_logging(
        level=level,
        format_type=settings.telemetry.log_format,
        logger_name="src",
        service=settings.app.name,
    )
    logging.getLogger().setLevel(level)


def _align_uvicorn_logging(settings: Settings) -> None:
    """Make uvicorn's loggers emit the same format as the application.

    Runs inside the lifespan, once uvicorn has installed its handlers.
    """
    level = _log_level(settings)
    formatter: logging.Formatter = (
        JsonFormatter(service=settings.app.name)
        if settings.telemetry.log_format == "json"
        else TextFormatter()
    )
    for name in _UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.setLevel(level)
        if not uvicorn_logger.handlers:
            uvicorn_logger.addHandler(logging.StreamHandler(sys.stdout))
            uvicorn_logger.propagate = False
        for handler in uvicorn_logger.handlers:
            handler.setFormatter(formatter)
            handler.setLevel(level)


_setup_logging(get_settings())


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Bootstrap indexes and buckets on startup, close clients on shutdown."""
    settings = get_settings()
    _align_uvicorn_logging(settings)

    await init_services(settings)
    try:
        yield
    finally:
        await shutdown_services()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()
    docs = settings.server.docs_enabled

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Video catalog: listings, enriched views and media lifecycle",
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        openapi_url="/openapi.json" if docs else None,
        lifespan=lifespan,
    )

    _configure_middleware(app, settings)
    _register_routes(app, settings)

    return app


def _configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure application middleware.

    The error handler is added last, making it the outermost middleware.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(
        LoggingMiddleware,
        identity_header=settings.server.identity_header,
    )
    app.middleware("http")(error_handler_middleware)
    register_exception_handlers(app)


def _register_routes(app: FastAPI, settings: Settings) -> None:
    """Register API routes."""
    # Probes stay unprefixed for orchestrators
    app.include_router(health.router, tags=["Health"])
    app.include_router(
        videos.router,
        prefix=settings.server.api_prefix,
        tags=["Videos"],
    )


# Create default app instance
app = create_app()
