"""Health check response model."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: Health status indicator ("ok" or "error").
        version: The version of opencode-radar.
        sensors: Names of the discovery sensors that are enabled.
    """

    status: str = Field(..., description="Health status of the service")
    version: str = Field(..., description="Version of opencode-radar")
    sensors: list[str] = Field(
        default_factory=list,
        description="Enabled discovery sensors",
    )
