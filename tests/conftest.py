"""Pytest configuration and shared fixtures for opencode-radar tests.

This module provides common fixtures used across all test modules,
including scripted sensors, test app creation and async client setup.
"""

import asyncio
from typing import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from opencode_radar import create_app
from opencode_radar.config import RadarSettings
from opencode_radar.sensors import Instance, Sensor


class ScriptedSensor(Sensor):
    """Sensor that replays a fixed script of (delay, instance) steps.

    Each discover() call plays the script for the matching call index;
    calls past the end of the scripts list play nothing.
    """

    def __init__(self, *scripts: list[tuple[float, Instance]]) -> None:
        self.scripts = list(scripts)
        self.calls: list[float | None] = []
        self.stop_count = 0

    async def discover(self, timeout: float | None = None) -> AsyncIterator[Instance]:
        index = len(self.calls)
        self.calls.append(timeout)
        script = self.scripts[index] if index < len(self.scripts) else []
        for delay, instance in script:
            await asyncio.sleep(delay)
            yield instance

    def stop(self) -> None:
        self.stop_count += 1


@pytest.fixture
def make_sensor():
    """Factory for ScriptedSensor instances.

    Returns:
        Callable building a ScriptedSensor from one script per discover() call.
    """
    return ScriptedSensor


@pytest.fixture
def test_settings(tmp_path):
    """Create test settings with isolated temporary directories.

    Args:
        tmp_path: Pytest fixture providing a temporary directory.

    Returns:
        RadarSettings: Settings instance configured for testing.
    """
    return RadarSettings(
        host="127.0.0.1",
        port=8765,
        discovery_timeout=0.5,
        mdns_enabled=False,
        proc_enabled=False,
        port_probe_enabled=False,
        storage_home=str(tmp_path / "opencode"),
        config_home=str(tmp_path / "home"),
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def test_app(test_settings):
    """Create a FastAPI test application instance.

    Args:
        test_settings: Test settings fixture.

    Returns:
        FastAPI: Configured test application.
    """
    return create_app(settings=test_settings)


@pytest_asyncio.fixture
async def async_client(test_app):
    """Create an async HTTP client for testing FastAPI endpoints.

    Args:
        test_app: Test application fixture.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
