"""Pydantic models for the instance inventory endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from opencode_radar.sensors.types import Instance


class InstanceResponse(BaseModel):
    """A discovered OpenCode instance."""

    port: int = Field(description="Port the instance listens on")
    source: str = Field(description="Sensor that found the instance (mdns, proc, port)")
    hostname: str | None = Field(default=None, description="Resolved host name")
    pid: int | None = Field(default=None, description="Process identifier")
    cwd: str | None = Field(default=None, description="Working directory of the process")
    identity: int | str = Field(
        description="Stable key: the pid, else \"<hostname or localhost>:<port>\""
    )

    @classmethod
    def from_instance(cls, instance: Instance) -> "InstanceResponse":
        return cls(**instance.to_dict(), identity=instance.identity)


class InstanceListResponse(BaseModel):
    """Response body for GET /api/v1/instances."""

    instances: list[InstanceResponse] = Field(
        default_factory=list,
        description="Instances in discovery order, previously known ones first",
    )
    count: int = Field(description="Number of instances")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "instances": [
                    {
                        "port": 4096,
                        "source": "proc",
                        "hostname": None,
                        "pid": 41235,
                        "cwd": "/home/user/project",
                        "identity": 41235,
                    }
                ],
                "count": 1,
            }
        }
    )
