"""Deduplicating cache over a fixed set of sensors.

The cache remembers every instance it has emitted. Each discover() call
replays those instances first, then streams genuinely new ones from a fresh
merged pass over the wrapped sensors. Deduplication is keyed on pid only;
instances without a pid are always passed through.
"""

import logging
from typing import AsyncIterator, Callable, Hashable, Iterable

from opencode_radar.sensors.merge import merge_iterators
from opencode_radar.sensors.types import Instance, Sensor

logger = logging.getLogger(__name__)


class CacheSensor(Sensor):
    """Sensor that replays known instances and filters out repeated pids.

    Attributes:
        sensors: The wrapped sensors, queried on every discover() call
    """

    def __init__(self, sensors: Iterable[Sensor]) -> None:
        """Initialize the cache.

        Args:
            sensors: Sensors to wrap; the set is fixed after construction
        """
        self.sensors: list[Sensor] = list(sensors)
        self._instances: list[Instance] = []

    @property
    def instances(self) -> list[Instance]:
        """All instances emitted so far, in discovery order."""
        return list(self._instances)

    async def discover(self, timeout: float | None = None) -> AsyncIterator[Instance]:
        """Replay cached instances, then stream new ones.

        Args:
            timeout: Per-sensor timeout in seconds, forwarded unchanged

        Yields:
            Instance: Cached instances first, then newly discovered ones
        """
        seen: set[int] = set()

        for instance in list(self._instances):
            if instance.pid is not None:
                seen.add(instance.pid)
            yield instance

        replayed = len(self._instances)
        logger.debug(f"Replayed {replayed} cached instances")

        merged = merge_iterators(sensor.discover(timeout) for sensor in self.sensors)
        try:
            async for instance in merged:
                if instance.pid is not None:
                    if instance.pid in seen:
                        logger.debug(f"Skipping already known pid {instance.pid}")
                        continue
                    seen.add(instance.pid)

                self._instances.append(instance)
                logger.info(
                    f"Discovered instance on port {instance.port} via {instance.source.value}"
                )
                yield instance
        finally:
            await merged.aclose()

        logger.debug(
            f"Discovery pass finished: {len(self._instances) - replayed} new instances"
        )

    def stop(self) -> None:
        """Forward cancellation to every wrapped sensor."""
        for sensor in self.sensors:
            sensor.stop()


async def distinct_instances(
    instances: AsyncIterator[Instance],
    key: Callable[[Instance], Hashable] = lambda instance: instance.identity,
) -> AsyncIterator[Instance]:
    """Pass through each instance whose key has not been seen in this stream.

    A long-lived CacheSensor replays every pid-less sighting it has ever
    recorded; one discovery pass wrapped in this filter yields one instance
    per key.

    Args:
        instances: A discovery stream, typically CacheSensor.discover()
        key: Key to deduplicate on, Instance.identity by default

    Yields:
        Instance: The first instance seen for each key
    """
    seen: set[Hashable] = set()
    try:
        async for instance in instances:
            instance_key = key(instance)
            if instance_key in seen:
                continue
            seen.add(instance_key)
            yield instance
    finally:
        aclose = getattr(instances, "aclose", None)
        if aclose is not None:
            await aclose()
