"""FastAPI routers for API endpoints.

This package contains all route handlers organized by resource type:
health, discovered instances and sessions.
"""

from opencode_radar.routers import health, instances, sessions

__all__ = [
    "health",
    "instances",
    "sessions",
]
