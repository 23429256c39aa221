"""mDNS discovery of OpenCode instances.

This module browses the local network for advertised HTTP services with
python-zeroconf and reports the ones whose service name identifies an
OpenCode server. Discovery listens for a fixed window; instances are
yielded as soon as each service resolves.
"""

import asyncio
import logging
from typing import AsyncIterator

from zeroconf import ServiceStateChange, Zeroconf
from zeroconf.asyncio import AsyncServiceBrowser, AsyncServiceInfo, AsyncZeroconf

from opencode_radar.sensors.types import Instance, InstanceSource, Sensor

logger = logging.getLogger(__name__)


class MdnsSensor(Sensor):
    """Sensor that finds instances advertised over mDNS.

    Attributes:
        service_type: The mDNS service type to browse
        name_match: Substring a service name must contain to be reported
        default_timeout: Listening window in seconds when none is given
        resolve_timeout: Time allowed to resolve one service, in seconds
    """

    def __init__(
        self,
        service_type: str = "_http._tcp.local.",
        name_match: str = "opencode",
        default_timeout: float = 5.0,
        resolve_timeout: float = 3.0,
    ) -> None:
        self.service_type = service_type
        self.name_match = name_match.lower()
        self.default_timeout = default_timeout
        self.resolve_timeout = resolve_timeout
        self._queue: asyncio.Queue[Instance | None] | None = None
        self._tasks: set[asyncio.Task] = set()

    async def discover(self, timeout: float | None = None) -> AsyncIterator[Instance]:
        """Listen for advertised instances until the window closes.

        Args:
            timeout: Listening window in seconds (defaults to default_timeout)

        Yields:
            Instance: Each matching service once it has resolved
        """
        window = timeout if timeout is not None else self.default_timeout
        queue: asyncio.Queue[Instance | None] = asyncio.Queue()
        self._queue = queue

        try:
            aiozc = AsyncZeroconf()
        except Exception as e:
            logger.warning(f"mDNS discovery unavailable: {e}")
            self._queue = None
            return

        browser: AsyncServiceBrowser | None = None
        try:
            browser = AsyncServiceBrowser(
                aiozc.zeroconf,
                [self.service_type],
                handlers=[self._on_service_state_change],
            )

            loop = asyncio.get_running_loop()
            deadline = loop.time() + window
            while True:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break
                try:
                    instance = await asyncio.wait_for(queue.get(), remaining)
                except asyncio.TimeoutError:
                    break
                if instance is None:
                    logger.debug("mDNS discovery stopped")
                    break
                yield instance
        except Exception as e:
            logger.warning(f"mDNS discovery failed: {e}")
        finally:
            self._queue = None
            for task in self._tasks:
                task.cancel()
            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)
            if browser is not None:
                await browser.async_cancel()
            await aiozc.async_close()

    def stop(self) -> None:
        """End the current listening window, if any."""
        if self._queue is not None:
            self._queue.put_nowait(None)

    def _on_service_state_change(
        self,
        zeroconf: Zeroconf,
        service_type: str,
        name: str,
        state_change: ServiceStateChange,
    ) -> None:
        if state_change is not ServiceStateChange.Added:
            return
        if self.name_match not in name.lower():
            return
        queue = self._queue
        if queue is None:
            return

        logger.debug(f"Resolving mDNS service {name}")
        task = asyncio.ensure_future(self._resolve(zeroconf, service_type, name, queue))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _resolve(
        self,
        zeroconf: Zeroconf,
        service_type: str,
        name: str,
        queue: asyncio.Queue[Instance | None],
    ) -> None:
        info = AsyncServiceInfo(service_type, name)
        try:
            found = await info.async_request(zeroconf, int(self.resolve_timeout * 1000))
        except Exception as e:
            logger.debug(f"Failed to resolve mDNS service {name}: {e}")
            return

        if not found or not info.port:
            logger.debug(f"mDNS service {name} did not resolve to a port")
            return

        hostname = info.server.rstrip(".") if info.server else None
        await queue.put(
            Instance(port=info.port, hostname=hostname, source=InstanceSource.MDNS)
        )
