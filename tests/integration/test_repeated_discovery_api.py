"""Integration tests for instances reported again on every discovery pass.

The long-lived cache keeps every pid-less sighting, so these check that each
response still lists an instance once and polls each port once.
"""

import pytest
from httpx import AsyncClient

from opencode_radar.sensors import Instance, InstanceSource

PORT_4096 = Instance(port=4096, hostname="127.0.0.1", source=InstanceSource.PORT)
MDNS_4096 = Instance(port=4096, hostname="devbox", source=InstanceSource.MDNS)

PASSES = 4


@pytest.fixture
def scripted_sensors(make_sensor):
    """Sensors reporting the same pid-less instances on every pass."""
    return [
        make_sensor(*[[(0.0, PORT_4096)] for _ in range(PASSES)]),
        make_sensor(*[[(0.01, MDNS_4096)] for _ in range(PASSES)]),
    ]


@pytest.mark.asyncio
async def test_active_sessions_stable_across_requests(
    async_client: AsyncClient, mock_status_client
):
    """Test that repeated requests report each live session once."""
    mock_status_client()

    counts = []
    for _ in range(PASSES):
        response = await async_client.get("/api/v1/sessions/active")
        assert response.status_code == 200
        counts.append(response.json()["count"])

    assert counts == [1] * PASSES


@pytest.mark.asyncio
async def test_instances_stable_across_requests(
    async_client: AsyncClient, patch_sensors
):
    """Test that repeated requests list each instance identity once."""
    responses = []
    for _ in range(PASSES):
        response = await async_client.get("/api/v1/instances")
        assert response.status_code == 200
        responses.append(response.json())

    for data in responses:
        assert data["count"] == 2
        assert [i["identity"] for i in data["instances"]] == [
            "127.0.0.1:4096",
            "devbox:4096",
        ]
    assert [len(s.calls) for s in patch_sensors] == [PASSES, PASSES]


@pytest.mark.asyncio
async def test_stream_lists_each_instance_once(async_client: AsyncClient):
    """Test that the SSE stream skips replayed duplicates."""
    await async_client.get("/api/v1/instances")

    response = await async_client.get("/api/v1/instances/stream")

    assert response.text.count("event: instance") == 2
    assert '"count": 2' in response.text
