"""Instance discovery for opencode-radar.

This package provides the Sensor contract, the concrete mDNS, process-table
and port-probe sensors, the fan-in merger and the deduplicating cache.
"""

from opencode_radar.config import RadarSettings
from opencode_radar.sensors.cache import CacheSensor, distinct_instances
from opencode_radar.sensors.mdns import MdnsSensor
from opencode_radar.sensors.merge import merge_iterators
from opencode_radar.sensors.port import PortSensor
from opencode_radar.sensors.proc import ProcSensor
from opencode_radar.sensors.types import Instance, InstanceSource, Sensor


def build_sensors(settings: RadarSettings) -> list[Sensor]:
    """Create the sensors enabled in the given settings.

    Args:
        settings: Application settings

    Returns:
        list[Sensor]: The enabled sensors, fastest first
    """
    sensors: list[Sensor] = []
    if settings.proc_enabled:
        sensors.append(ProcSensor())
    if settings.port_probe_enabled:
        sensors.append(
            PortSensor(
                ports=settings.probe_ports,
                host=settings.probe_host,
                connect_timeout=settings.probe_connect_timeout,
            )
        )
    if settings.mdns_enabled:
        sensors.append(
            MdnsSensor(
                service_type=settings.mdns_service_type,
                name_match=settings.mdns_name_match,
                default_timeout=settings.discovery_timeout,
            )
        )
    return sensors


__all__ = [
    "build_sensors",
    # Core classes
    "CacheSensor",
    "MdnsSensor",
    "PortSensor",
    "ProcSensor",
    "Sensor",
    "distinct_instances",
    "merge_iterators",
    # Types
    "Instance",
    "InstanceSource",
]
