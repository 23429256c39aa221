"""Pydantic models for API response schemas.

This package contains all Pydantic models used for serializing API
responses across all endpoints.
"""

from opencode_radar.models.health import HealthResponse
from opencode_radar.models.instances import InstanceListResponse, InstanceResponse
from opencode_radar.models.sessions import (
    ActiveSessionListResponse,
    SessionStatusItem,
    StoredSessionItem,
    StoredSessionListResponse,
)

__all__ = [
    "ActiveSessionListResponse",
    "HealthResponse",
    "InstanceListResponse",
    "InstanceResponse",
    "SessionStatusItem",
    "StoredSessionItem",
    "StoredSessionListResponse",
]
