"""Health check endpoint."""

import time

from fastapi import APIRouter, Depends

from adcanvas.api.deps import get_registry
from adcanvas.errors import ConfigError
from adcanvas.models.responses import HealthDependency, HealthResponse
from adcanvas.registry import Registry

router = APIRouter()

_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check(registry: Registry = Depends(get_registry)):
    """System health check with dependency status."""
    dependencies = {}

    # Check platform rule source
    start = time.time()
    try:
        for platform in registry.rules.supported_platforms():
            registry.rules.get_profile(platform)
        latency = (time.time() - start) * 1000
        dependencies["platform_rules"] = HealthDependency(status="healthy", latency_ms=round(latency, 2))
    except ConfigError as e:
        dependencies["platform_rules"] = HealthDependency(status="unhealthy", message=e.message)

    # Model clients are created lazily; report how many are warm
    dependencies["model_clients"] = HealthDependency(
        status="healthy",
        message=f"{len(registry.models)} client(s) cached",
    )

    any_unhealthy = any(d.status == "unhealthy" for d in dependencies.values())

    return HealthResponse(
        status="degraded" if any_unhealthy else "healthy",
        uptime_seconds=round(time.time() - _start_time, 2),
        dependencies=dependencies,
    )
