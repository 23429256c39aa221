"""Type definitions for instance discovery.

This module defines the discovered-instance record and the Sensor contract
that every discovery mechanism implements.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator


class InstanceSource(str, Enum):
    """Discovery mechanism that produced an instance."""

    MDNS = "mdns"
    PROC = "proc"
    PORT = "port"


@dataclass(frozen=True)
class Instance:
    """A running OpenCode instance found by a sensor.

    Attributes:
        port: TCP port the instance listens on
        source: Which sensor reported the instance
        hostname: Resolved host name (mDNS and port probes only)
        pid: Process identifier (process-table discovery only)
        cwd: Working directory of the process, when readable
    """

    port: int
    source: InstanceSource
    hostname: str | None = None
    pid: int | None = None
    cwd: str | None = None

    @property
    def identity(self) -> int | str:
        """Stable key for this instance: the pid, else host and port."""
        if self.pid is not None:
            return self.pid
        return f"{self.hostname or 'localhost'}:{self.port}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "port": self.port,
            "source": self.source.value,
            "hostname": self.hostname,
            "pid": self.pid,
            "cwd": self.cwd,
        }


class Sensor(ABC):
    """A mechanism that can enumerate running instances.

    discover() returns a finite async iterator which is not restartable;
    call discover() again for a fresh pass. Sensors never raise from
    discovery: a failing sensor simply yields nothing.
    """

    @abstractmethod
    def discover(self, timeout: float | None = None) -> AsyncIterator[Instance]:
        """Stream instances until the sensor is done or timeout seconds pass."""

    def stop(self) -> None:
        """Request cancellation of any in-flight discovery."""
