"""Live session status polling across running instances.

This module queries each discovered instance's session status endpoint with
httpx and flattens the returned status maps into one stream of
SessionStatus records. Polling is best-effort: an instance that cannot be
reached or returns garbage contributes nothing.
"""

import logging
from typing import Any, AsyncIterator

import httpx

from opencode_radar.sensors.types import Instance
from opencode_radar.sessions.types import SessionState, SessionStatus

logger = logging.getLogger(__name__)


def _optional(value: Any, expected: type) -> Any:
    # bool is an int subclass; never accept it as a number
    if isinstance(value, bool) or not isinstance(value, expected):
        return None
    return value


def parse_status_entry(session_id: str, port: int, entry: Any) -> SessionStatus | None:
    """Convert one status map entry into a SessionStatus.

    Args:
        session_id: Key of the entry in the status map
        port: Port of the instance that reported it
        entry: The raw entry value

    Returns:
        SessionStatus | None: The parsed record, or None if malformed
    """
    if not isinstance(entry, dict):
        return None

    try:
        state = SessionState(entry.get("type"))
    except ValueError:
        return None

    if state is not SessionState.RETRY:
        return SessionStatus(session_id=session_id, port=port, state=state)

    return SessionStatus(
        session_id=session_id,
        port=port,
        state=state,
        retry_attempt=_optional(entry.get("attempt"), int),
        retry_message=_optional(entry.get("message"), str),
        retry_next_at=_optional(entry.get("next"), int),
    )


class StatusPoller:
    """Queries instance status endpoints and flattens the results.

    Attributes:
        client: The httpx client used for every query
        host: Host name used to reach instances
        path: Path of the session status endpoint
        timeout: Seconds allowed for one status query
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        host: str = "localhost",
        path: str = "/api/session/status",
        timeout: float = 2.0,
    ) -> None:
        self.client = client
        self.host = host
        self.path = path
        self.timeout = timeout

    async def fetch_status(self, port: int) -> dict[str, Any] | None:
        """Fetch the raw session status map of one instance.

        Args:
            port: Port of the instance to query

        Returns:
            dict | None: The status map, or None if the query failed
        """
        url = f"http://{self.host}:{port}{self.path}"
        try:
            response = await self.client.get(url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.debug(f"Status query to {url} failed: {e}")
            return None
        except ValueError as e:
            logger.debug(f"Status response from {url} is not valid JSON: {e}")
            return None

        if not isinstance(payload, dict):
            logger.debug(f"Status response from {url} is not an object")
            return None
        return payload

    async def poll(self, instances: AsyncIterator[Instance]) -> AsyncIterator[SessionStatus]:
        """Stream the session statuses of every instance, in input order.

        Args:
            instances: Lazily discovered instances

        Yields:
            SessionStatus: One record per well-formed session entry
        """
        async for instance in instances:
            status_map = await self.fetch_status(instance.port)
            if status_map is None:
                continue

            for session_id, entry in status_map.items():
                status = parse_status_entry(session_id, instance.port, entry)
                if status is None:
                    logger.debug(
                        f"Skipping malformed status entry {session_id} on port {instance.port}"
                    )
                    continue
                yield status


async def poll_statuses(
    instances: AsyncIterator[Instance],
    client: httpx.AsyncClient | None = None,
    **kwargs: Any,
) -> AsyncIterator[SessionStatus]:
    """Stream session statuses for a stream of instances.

    Args:
        instances: Lazily discovered instances
        client: Optional httpx client; one is created and closed if omitted
        **kwargs: Forwarded to StatusPoller (host, path, timeout)

    Yields:
        SessionStatus: One record per well-formed session entry
    """
    if client is not None:
        async for status in StatusPoller(client, **kwargs).poll(instances):
            yield status
        return

    async with httpx.AsyncClient() as owned_client:
        async for status in StatusPoller(owned_client, **kwargs).poll(instances):
            yield status
