"""Sessions router for stored and live sessions.

This module provides REST API endpoints for:
- Listing sessions persisted in OpenCode's storage directory
- Listing live session statuses across all running instances
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from opencode_radar.dependencies import (
    get_cache_sensor,
    get_session_store,
    get_status_poller,
)
from opencode_radar.models.sessions import (
    ActiveSessionListResponse,
    SessionStatusItem,
    StoredSessionItem,
    StoredSessionListResponse,
)
from opencode_radar.routers.instances import TimeoutQuery, resolve_timeout
from opencode_radar.sensors import CacheSensor, distinct_instances
from opencode_radar.sessions import (
    SessionFilter,
    SessionStore,
    StatusPoller,
    filter_sessions,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


@router.get("", response_model=StoredSessionListResponse, summary="List stored sessions")
async def list_stored_sessions(
    store: Annotated[SessionStore, Depends(get_session_store)],
    dir_pattern: Annotated[
        str | None,
        Query(alias="dir", description="Directory pattern; * and ? are wildcards"),
    ] = None,
) -> StoredSessionListResponse:
    """List sessions persisted on disk, newest first.

    Args:
        store: Injected SessionStore
        dir_pattern: Optional directory pattern filter

    Returns:
        StoredSessionListResponse with matching sessions
    """
    sessions = store.list_sessions(dir_pattern=dir_pattern)
    items = [StoredSessionItem.from_session(s) for s in sessions]
    return StoredSessionListResponse(sessions=items, count=len(items))


@router.get(
    "/active",
    response_model=ActiveSessionListResponse,
    summary="List live session statuses",
)
async def list_active_sessions(
    request: Request,
    cache: Annotated[CacheSensor, Depends(get_cache_sensor)],
    poller: Annotated[StatusPoller, Depends(get_status_poller)],
    busy: bool = False,
    idle: bool = False,
    retrying: bool = False,
    session_id: Annotated[
        str | None,
        Query(description="Substring the session ID must contain"),
    ] = None,
    min_retry_attempt: Annotated[int | None, Query(ge=0)] = None,
    timeout: TimeoutQuery = None,
) -> ActiveSessionListResponse:
    """Discover instances and report the live status of their sessions.

    Each port is queried at most once. Unreachable instances are skipped
    silently.

    Args:
        request: FastAPI request object
        cache: Injected discovery cache
        poller: Injected status poller
        busy: Only busy sessions
        idle: Only idle sessions
        retrying: Only retrying sessions
        session_id: Session ID substring filter
        min_retry_attempt: Minimum retry attempt for retrying sessions
        timeout: Optional per-sensor timeout override

    Returns:
        ActiveSessionListResponse with matching session statuses
    """
    criteria = SessionFilter(
        busy=busy,
        idle=idle,
        retrying=retrying,
        session_id_pattern=session_id,
        min_retry_attempt=min_retry_attempt,
    )
    window = resolve_timeout(request, timeout)

    async with request.app.state.discovery_lock:
        # Status is always fetched from status_host, so one query per port
        instances = distinct_instances(
            cache.discover(window), key=lambda instance: instance.port
        )
        statuses = filter_sessions(poller.poll(instances), criteria)
        items = [SessionStatusItem.from_status(status) async for status in statuses]

    logger.info(f"Active session listing returned {len(items)} sessions")
    return ActiveSessionListResponse(sessions=items, count=len(items))
