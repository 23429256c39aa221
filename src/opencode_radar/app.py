"""FastAPI application factory and lifespan management.

This module contains the create_app() factory function that creates and
configures the FastAPI application instance, including lifespan management
for the discovery cache and the shared HTTP client.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from opencode_radar import __version__
from opencode_radar.config import RadarSettings
from opencode_radar.routers import health, instances, sessions
from opencode_radar.sensors import CacheSensor, build_sensors

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for FastAPI application.

    The discovery cache and the HTTP client are created once at startup
    and stored in app.state for reuse across all requests.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control is yielded while the app is running.
    """
    settings: RadarSettings = app.state.settings

    sensors = build_sensors(settings)
    app.state.cache_sensor = CacheSensor(sensors)
    app.state.discovery_lock = asyncio.Lock()
    app.state.http_client = httpx.AsyncClient()
    logger.info(
        f"Initialized discovery with sensors: {[type(s).__name__ for s in sensors]}"
    )

    yield

    # Shutdown: stop discovery and close the client
    app.state.cache_sensor.stop()
    await app.state.http_client.aclose()
    logger.info("Discovery stopped and HTTP client closed")


def create_app(settings: RadarSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional RadarSettings instance. If not provided,
                  settings will be loaded from environment variables.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        from opencode_radar.dependencies import get_settings

        settings = get_settings()

    app = FastAPI(
        title="opencode-radar",
        description="Discovery and live session inventory for running OpenCode instances",
        version=__version__,
        lifespan=lifespan,
    )

    # Store settings in app.state for lifespan access
    app.state.settings = settings

    # Note: FastAPI's type hints for add_middleware are overly strict
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(instances.router)
    app.include_router(sessions.router)

    return app
