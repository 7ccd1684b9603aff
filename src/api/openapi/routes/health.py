"""Health check endpoints."""

import asyncio
from enum import Enum
from typing import Any

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from src.api.dependencies import FactoryDep, SettingsDep
from src.commons.infrastructure.blob.base import HealthStatus as ProviderHealth

router = APIRouter()


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Health status of a single component."""

    name: str = Field(description="Component name")
    status: HealthStatus = Field(description="Component health status")
    message: str | None = Field(default=None, description="Additional details")
    latency_ms: float | None = Field(default=None, description="Probe latency")


class HealthResponse(BaseModel):
    """Health check response."""

    status: HealthStatus = Field(description="Overall health status")
    version: str = Field(description="Application version")
    environment: str = Field(description="Deployment environment")
    components: list[ComponentHealth] = Field(
        default_factory=list,
        description="Individual component health",
    )


class LivenessResponse(BaseModel):
    """Simple liveness response."""

    status: str = Field(default="ok")


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool = Field(description="Whether the service is ready to accept requests")
    checks: dict[str, bool] = Field(
        default_factory=dict,
        description="Individual readiness checks",
    )


async def _check(name: str, get_provider: Any) -> tuple[str, ProviderHealth]:
    try:
        return name, await get_provider().health_check()
    except Exception as e:
        return name, ProviderHealth(healthy=False, latency_ms=0.0, message=str(e))


async def _probe(factory: FactoryDep) -> dict[str, ProviderHealth]:
    """Ping the blob store and the document store concurrently."""
    results = await asyncio.gather(
        _check("blob_storage", factory.get_blob_storage),
        _check("document_db", factory.get_document_db),
    )
    return dict(results)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Get overall health status of the service and its components.",
)
async def health_check(
    settings: SettingsDep,
    factory: FactoryDep,
) -> HealthResponse:
    """Check health of all service components."""
    components = [
        ComponentHealth(
            name=name,
            status=HealthStatus.HEALTHY if probe.healthy else HealthStatus.UNHEALTHY,
            message=probe.message,
            latency_ms=round(probe.latency_ms, 2),
        )
        for name, probe in (await _probe(factory)).items()
    ]

    unhealthy_count = sum(1 for c in components if c.status == HealthStatus.UNHEALTHY)
    if unhealthy_count == 0:
        overall_status = HealthStatus.HEALTHY
    elif unhealthy_count < len(components):
        overall_status = HealthStatus.DEGRADED
    else:
        overall_status = HealthStatus.UNHEALTHY

    return HealthResponse(
        status=overall_status,
        version=settings.app.version,
        environment=settings.app.environment,
        components=components,
    )


@router.get(
    "/health/live",
    response_model=LivenessResponse,
    summary="Liveness probe",
    description="Simple liveness check for Kubernetes probes.",
)
async def liveness() -> LivenessResponse:
    """Simple liveness check - just verifies the app is running."""
    return LivenessResponse(status="ok")


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Readiness check for Kubernetes probes.",
)
async def readiness(
    factory: FactoryDep,
    response: Response,
) -> ReadinessResponse:
    """Check if service is ready to accept requests.

    Both stores must answer before the service takes traffic; otherwise
    the probe answers 503.
    """
    checks = {name: probe.healthy for name, probe in (await _probe(factory)).items()}
    ready = all(checks.values())
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(ready=ready, checks=checks)
