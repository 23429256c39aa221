"""Port-probe discovery of OpenCode instances.

Tries a TCP connect to each configured port and reports the ones that
accept a connection.
"""

import asyncio
import logging
from typing import AsyncIterator, Iterable

from opencode_radar.sensors.types import Instance, InstanceSource, Sensor

logger = logging.getLogger(__name__)


class PortSensor(Sensor):
    """Sensor that probes a fixed list of local ports.

    Attributes:
        host: Address to probe
        ports: Ports to try, in order
        connect_timeout: Seconds allowed for each connection attempt
    """

    def __init__(
        self,
        ports: Iterable[int],
        host: str = "127.0.0.1",
        connect_timeout: float = 0.5,
    ) -> None:
        self.host = host
        self.ports = list(ports)
        self.connect_timeout = connect_timeout
        self._stopped = False

    async def probe(self, port: int) -> Instance | None:
        """Attempt one TCP connection.

        Args:
            port: The port to probe

        Returns:
            Instance | None: An instance if the port accepted the connection
        """
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, port), self.connect_timeout
            )
        except (OSError, asyncio.TimeoutError):
            return None

        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug(f"Error closing probe connection to port {port}: {e}")

        return Instance(port=port, hostname=self.host, source=InstanceSource.PORT)

    async def discover(self, timeout: float | None = None) -> AsyncIterator[Instance]:
        """Probe every configured port concurrently.

        Args:
            timeout: Maximum seconds for the whole scan (None waits)

        Yields:
            Instance: Each open port, in completion order
        """
        self._stopped = False
        if not self.ports:
            return

        tasks = [asyncio.ensure_future(self.probe(port)) for port in self.ports]
        try:
            for next_done in asyncio.as_completed(tasks, timeout=timeout):
                try:
                    instance = await next_done
                except asyncio.TimeoutError:
                    logger.debug(f"Port scan did not finish within {timeout}s")
                    break
                if self._stopped:
                    break
                if instance is not None:
                    yield instance
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    def stop(self) -> None:
        self._stopped = True
