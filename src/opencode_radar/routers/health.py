"""Health check endpoint router."""

import logging

from fastapi import APIRouter, Request

from opencode_radar import __version__
from opencode_radar.models.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint.

    Returns the current health status and version of opencode-radar along
    with the discovery sensors in use.

    Args:
        request: The FastAPI request object.

    Returns:
        HealthResponse: Health status and version information.
    """
    sensors: list[str] = []
    if hasattr(request.app.state, "cache_sensor"):
        sensors = [type(s).__name__ for s in request.app.state.cache_sensor.sensors]

    return HealthResponse(status="ok", version=__version__, sensors=sensors)
