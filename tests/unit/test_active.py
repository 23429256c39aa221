"""Unit tests for live session status polling."""

import httpx
import pytest

from opencode_radar.sensors import Instance, InstanceSource
from opencode_radar.sessions import (
    SessionState,
    SessionStatus,
    StatusPoller,
    parse_status_entry,
    poll_statuses,
)


def instance(port: int) -> Instance:
    return Instance(port=port, source=InstanceSource.PORT, hostname="localhost")


async def instances_of(*ports):
    for port in ports:
        yield instance(port)


def mock_client(responses: dict) -> httpx.AsyncClient:
    """Create an httpx client whose responses are keyed by port.

    A value that is an exception class is raised as a transport error; an
    httpx.Response is returned as is; anything else is returned as JSON.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/session/status"
        value = responses.get(request.url.port, httpx.ConnectError)
        if isinstance(value, type) and issubclass(value, Exception):
            raise value("unreachable", request=request)
        if isinstance(value, httpx.Response):
            return value
        return httpx.Response(200, json=value)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def collect(iterator):
    return [value async for value in iterator]


@pytest.mark.asyncio
async def test_poll_skips_unknown_state():
    """Test that entries with an unrecognised type are omitted."""
    client = mock_client(
        {4096: {"ses_1": {"type": "busy"}, "ses_2": {"type": "bogus"}}}
    )
    async with client:
        result = await collect(StatusPoller(client).poll(instances_of(4096)))

    assert result == [SessionStatus(session_id="ses_1", port=4096, state=SessionState.BUSY)]


@pytest.mark.asyncio
async def test_poll_skips_unreachable_instance():
    """Test that an unreachable instance contributes nothing and raises nothing."""
    client = mock_client({4097: {"ses_9": {"type": "idle"}}})
    async with client:
        result = await collect(StatusPoller(client).poll(instances_of(4096, 4097)))

    assert result == [SessionStatus(session_id="ses_9", port=4097, state=SessionState.IDLE)]


@pytest.mark.asyncio
async def test_poll_round_trips_retry_fields():
    """Test that retry details pass through unchanged."""
    client = mock_client(
        {
            4096: {
                "ses_r": {
                    "type": "retry",
                    "attempt": 3,
                    "message": "Rate limited",
                    "next": 1760000000123,
                },
                "ses_bare": {"type": "retry"},
            }
        }
    )
    async with client:
        result = await collect(StatusPoller(client).poll(instances_of(4096)))

    assert result == [
        SessionStatus(
            session_id="ses_r",
            port=4096,
            state=SessionState.RETRY,
            retry_attempt=3,
            retry_message="Rate limited",
            retry_next_at=1760000000123,
        ),
        SessionStatus(session_id="ses_bare", port=4096, state=SessionState.RETRY),
    ]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"ses_1": {"type": "busy"}}),
        httpx.Response(404),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=["ses_1"]),
    ],
)
@pytest.mark.asyncio
async def test_poll_tolerates_bad_responses(response):
    """Test that failed or malformed responses yield no statuses."""
    client = mock_client({4096: response})
    async with client:
        result = await collect(StatusPoller(client).poll(instances_of(4096)))

    assert result == []


@pytest.mark.asyncio
async def test_poll_tolerates_timeouts():
    """Test that a timed out query is treated like an unreachable instance."""
    client = mock_client({4096: httpx.ReadTimeout, 4097: {"a": {"type": "busy"}}})
    async with client:
        result = await collect(StatusPoller(client).poll(instances_of(4096, 4097)))

    assert [s.port for s in result] == [4097]


@pytest.mark.asyncio
async def test_poll_keeps_instance_order():
    """Test that instances are processed in the order they arrive."""
    client = mock_client(
        {
            5000: {"b": {"type": "idle"}},
            4000: {"a": {"type": "busy"}},
        }
    )
    async with client:
        result = await collect(StatusPoller(client).poll(instances_of(5000, 4000)))

    assert [(s.port, s.session_id) for s in result] == [(5000, "b"), (4000, "a")]


@pytest.mark.asyncio
async def test_poll_statuses_uses_given_client():
    """Test the module-level helper with an explicit client and options."""

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.host == "127.0.0.1"
        assert request.url.path == "/session/status"
        return httpx.Response(200, json={"s": {"type": "idle"}})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        result = await collect(
            poll_statuses(
                instances_of(4096),
                client=client,
                host="127.0.0.1",
                path="/session/status",
            )
        )

    assert [s.session_id for s in result] == ["s"]


@pytest.mark.parametrize(
    "entry",
    [None, "busy", 3, [], {}, {"type": None}, {"type": "retrying"}, {"type": ["busy"]}],
)
def test_parse_status_entry_rejects_malformed(entry):
    """Test that entries without a recognised type are rejected."""
    assert parse_status_entry("ses", 4096, entry) is None


def test_parse_status_entry_ignores_retry_fields_outside_retry():
    """Test that retry fields are only kept for retry states."""
    status = parse_status_entry("ses", 4096, {"type": "busy", "attempt": 2})

    assert status == SessionStatus(session_id="ses", port=4096, state=SessionState.BUSY)


def test_parse_status_entry_drops_mistyped_retry_fields():
    """Test that retry fields of the wrong type are left unset."""
    status = parse_status_entry(
        "ses", 4096, {"type": "retry", "attempt": "2", "message": 5, "next": True}
    )

    assert status is not None
    assert status.retry_attempt is None
    assert status.retry_message is None
    assert status.retry_next_at is None
