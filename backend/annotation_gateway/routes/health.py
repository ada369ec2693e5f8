"""
Annotation Gateway - Health Check Route
=========================================

What:  Health check endpoint for container and load balancer probes.
How:   Reports whether credentials are configured and whether the GitHub
       repository answers with them.

Status levels:
    - healthy:   configured and the repository is reachable
    - degraded:  process is up but remote calls will fail (HTTP 200 either way)
"""

import logging
import time

from fastapi import APIRouter, Depends, Request

from annotation_gateway import __version__
from annotation_gateway.schemas.content import HealthResponse
from annotation_gateway.services.gateway import ContentGateway, get_gateway

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    request: Request,
    gateway: ContentGateway = Depends(get_gateway),
) -> HealthResponse:
    settings = request.app.state.settings
    overall = "healthy"

    if not settings.is_configured:
        remote_status = "unconfigured"
        overall = "degraded"
    else:
        try:
            reachable = await gateway.client.health_check()
        except Exception as e:
            logger.warning("Health check: repository probe raised: %s", str(e))
            reachable = False
        remote_status = "available" if reachable else "unavailable"
        if not reachable:
            overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        repository=settings.github_repo if settings.has_valid_repo else "unconfigured",
        remote=remote_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
