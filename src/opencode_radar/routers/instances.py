"""Instances router for the discovered instance inventory.

This module provides endpoints for:
- Listing all discovered instances
- Streaming instances via SSE as they are discovered
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sse_starlette.sse import EventSourceResponse

from opencode_radar.dependencies import get_cache_sensor
from opencode_radar.models.instances import InstanceListResponse, InstanceResponse
from opencode_radar.sensors import CacheSensor, distinct_instances

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/instances", tags=["instances"])

TimeoutQuery = Annotated[
    float | None,
    Query(ge=0, le=60, description="Per-sensor discovery timeout in seconds"),
]


def resolve_timeout(request: Request, timeout: float | None) -> float:
    """Fall back to the configured discovery timeout."""
    if timeout is not None:
        return timeout
    return request.app.state.settings.discovery_timeout


@router.get("", response_model=InstanceListResponse, summary="List instances")
async def list_instances(
    request: Request,
    cache: Annotated[CacheSensor, Depends(get_cache_sensor)],
    timeout: TimeoutQuery = None,
) -> InstanceListResponse:
    """Run one discovery pass and return every known instance once.

    Instances found by earlier requests are included without waiting for
    the sensors again.

    Args:
        request: FastAPI request object
        cache: Injected discovery cache
        timeout: Optional per-sensor timeout override

    Returns:
        InstanceListResponse with instances in discovery order
    """
    window = resolve_timeout(request, timeout)

    async with request.app.state.discovery_lock:
        found = [
            InstanceResponse.from_instance(instance)
            async for instance in distinct_instances(cache.discover(window))
        ]

    logger.info(f"Instance listing returned {len(found)} instances")
    return InstanceListResponse(instances=found, count=len(found))


@router.get("/stream", summary="Stream instances")
async def stream_instances(
    request: Request,
    cache: Annotated[CacheSensor, Depends(get_cache_sensor)],
    timeout: TimeoutQuery = None,
) -> EventSourceResponse:
    """Stream instances via Server-Sent Events (SSE) as they are found.

    Args:
        request: FastAPI request object
        cache: Injected discovery cache
        timeout: Optional per-sensor timeout override

    Returns:
        EventSourceResponse with SSE events

    SSE Events:
        - instance: One discovered instance
        - done: Discovery pass is complete, with the instance count
    """
    window = resolve_timeout(request, timeout)

    async def event_generator():
        """Generate SSE events from a discovery pass."""
        count = 0
        async with request.app.state.discovery_lock:
            discovery = distinct_instances(cache.discover(window))
            try:
                async for instance in discovery:
                    if await request.is_disconnected():
                        logger.warning("Client disconnected during instance stream")
                        cache.stop()
                        break

                    count += 1
                    yield {
                        "event": "instance",
                        "data": InstanceResponse.from_instance(instance).model_dump_json(),
                    }
            finally:
                await discovery.aclose()

        yield {"event": "done", "data": f'{{"count": {count}}}'}

    return EventSourceResponse(event_generator())
