"""Fixtures for API integration tests.

Sensors are replaced with scripted ones and the shared HTTP client is
swapped for one backed by httpx.MockTransport, so no real discovery or
network traffic happens.
"""

from unittest.mock import patch

import httpx
import pytest

from opencode_radar.sensors import Instance, InstanceSource

PROC_10 = Instance(port=4096, pid=10, cwd="/work/api", source=InstanceSource.PROC)
MDNS_4097 = Instance(port=4097, hostname="devbox", source=InstanceSource.MDNS)
PORT_4098 = Instance(port=4098, hostname="127.0.0.1", source=InstanceSource.PORT)

STATUS_BY_PORT = {
    4096: {
        "ses_busy": {"type": "busy"},
        "ses_weird": {"type": "unknown"},
    },
    4097: {
        "ses_idle": {"type": "idle"},
        "ses_retry": {
            "type": "retry",
            "attempt": 3,
            "message": "Provider overloaded",
            "next": 1760000000000,
        },
    },
}


@pytest.fixture
def scripted_sensors(make_sensor):
    """Sensors reporting three instances on the first pass only."""
    return [
        make_sensor([(0.0, PROC_10)]),
        make_sensor([(0.02, MDNS_4097), (0.0, PORT_4098)]),
    ]


@pytest.fixture(autouse=True)
def patch_sensors(scripted_sensors):
    """Make the app build the scripted sensors."""
    with patch("opencode_radar.app.build_sensors", return_value=scripted_sensors):
        yield scripted_sensors


@pytest.fixture
def mock_status_client(test_app):
    """Install an httpx client answering status queries from STATUS_BY_PORT.

    Port 4098 is unreachable.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        status_map = STATUS_BY_PORT.get(request.url.port)
        if status_map is None:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json=status_map)

    def install():
        test_app.state.http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(handler)
        )

    return install
