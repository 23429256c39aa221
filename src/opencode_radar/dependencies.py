"""Dependency injection providers for FastAPI endpoints.

This module provides FastAPI dependency functions that are used across
multiple routers to inject settings and the long-lived discovery objects.
"""

from functools import lru_cache

from fastapi import HTTPException, Request

from opencode_radar.config import RadarSettings
from opencode_radar.sensors import CacheSensor
from opencode_radar.sessions import SessionStore, StatusPoller


@lru_cache
def get_settings() -> RadarSettings:
    """Get the application settings instance.

    This function is cached so that the same settings instance is reused
    across all requests. Settings are loaded from environment variables
    with the OPENCODE_RADAR_ prefix.

    Returns:
        RadarSettings: The application configuration settings.
    """
    return RadarSettings()


def get_cache_sensor(request: Request) -> CacheSensor:
    """Get the shared CacheSensor from app state.

    The cache is created once at startup so that instances found by one
    request are replayed instantly to the next.

    Args:
        request: The FastAPI request object.

    Returns:
        CacheSensor: The application's discovery cache.

    Raises:
        HTTPException: If discovery is not initialized (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "cache_sensor"):
        raise HTTPException(
            status_code=503,
            detail="Instance discovery not initialized",
        )
    return request.app.state.cache_sensor


def get_status_poller(request: Request) -> StatusPoller:
    """Get a StatusPoller bound to the shared HTTP client.

    Args:
        request: The FastAPI request object.

    Returns:
        StatusPoller: A poller configured from settings.

    Raises:
        HTTPException: If the HTTP client is not initialized (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "http_client"):
        raise HTTPException(
            status_code=503,
            detail="HTTP client not initialized",
        )

    settings: RadarSettings = request.app.state.settings
    return StatusPoller(
        client=request.app.state.http_client,
        host=settings.status_host,
        path=settings.status_path,
        timeout=settings.status_timeout,
    )


def get_session_store(request: Request) -> SessionStore:
    """Get a SessionStore for the configured storage directory.

    Args:
        request: The FastAPI request object.

    Returns:
        SessionStore: A new SessionStore instance.
    """
    # Use settings from app.state so tests can use their own isolated settings
    settings: RadarSettings = request.app.state.settings
    return SessionStore(storage_dir=settings.resolved_storage_dir)
