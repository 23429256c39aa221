"""Process-table discovery of OpenCode instances.

This module scans running processes with psutil for OpenCode servers and
reports their pid, port and working directory. The scan is blocking and
runs in a worker thread.
"""

import asyncio
import logging
from typing import AsyncIterator

import psutil

from opencode_radar.sensors.types import Instance, InstanceSource, Sensor

logger = logging.getLogger(__name__)

RUNTIME_NAMES = ("bun", "node")


def is_opencode_cmdline(cmdline: list[str]) -> bool:
    """Check whether a process command line belongs to an OpenCode server.

    The executable itself may be the opencode binary, or a JavaScript
    runtime whose arguments reference opencode.

    Args:
        cmdline: The process argument vector

    Returns:
        bool: True if the process looks like an OpenCode instance
    """
    if not cmdline:
        return False

    executable = cmdline[0].lower()
    if "opencode" in executable:
        return True

    if not any(runtime in executable for runtime in RUNTIME_NAMES):
        return False

    args = " ".join(cmdline[1:]).lower()
    return "opencode" in args


def extract_port_from_args(args: list[str]) -> int | None:
    """Find the value of a --port option in an argument list.

    Accepts both "--port 4096" and "--port=4096" forms.

    Args:
        args: The process argument vector

    Returns:
        int | None: The port, or None if absent or not a number
    """
    for i, arg in enumerate(args):
        value = None
        if arg == "--port" and i + 1 < len(args):
            value = args[i + 1]
        elif arg.startswith("--port="):
            value = arg.split("=", 1)[1]

        if value is not None:
            try:
                return int(value)
            except ValueError:
                continue
    return None


def _listening_port(proc: psutil.Process) -> int | None:
    try:
        connections = proc.net_connections(kind="inet")
    except (psutil.AccessDenied, psutil.NoSuchProcess, psutil.ZombieProcess):
        return None

    ports = sorted(
        conn.laddr.port for conn in connections if conn.status == psutil.CONN_LISTEN
    )
    return ports[0] if ports else None


def _read_cwd(proc: psutil.Process) -> str | None:
    try:
        return proc.cwd()
    except (psutil.AccessDenied, psutil.NoSuchProcess, psutil.ZombieProcess):
        return None


def scan_processes() -> list[Instance]:
    """Enumerate OpenCode processes on this machine.

    Processes that disappear or deny access mid-scan are skipped, as are
    processes without a discoverable port.

    Returns:
        list[Instance]: One instance per OpenCode process with a known port
    """
    instances: list[Instance] = []

    for proc in psutil.process_iter(["pid", "cmdline"]):
        try:
            cmdline = proc.info.get("cmdline") or []
            if not is_opencode_cmdline(cmdline):
                continue

            pid = proc.info["pid"]
            port = extract_port_from_args(cmdline)
            if port is None:
                port = _listening_port(proc)
            if port is None:
                logger.debug(f"OpenCode process {pid} has no discoverable port")
                continue

            instances.append(
                Instance(
                    port=port,
                    pid=pid,
                    cwd=_read_cwd(proc),
                    source=InstanceSource.PROC,
                )
            )
        except (psutil.AccessDenied, psutil.NoSuchProcess, psutil.ZombieProcess):
            continue

    logger.debug(f"Process scan found {len(instances)} OpenCode instances")
    return instances


class ProcSensor(Sensor):
    """Sensor that finds instances by inspecting the process table."""

    async def discover(self, timeout: float | None = None) -> AsyncIterator[Instance]:
        """Scan the process table once.

        Args:
            timeout: Maximum seconds to wait for the scan (None waits)

        Yields:
            Instance: Each OpenCode process with a known port
        """
        try:
            instances = await asyncio.wait_for(
                asyncio.to_thread(scan_processes), timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Process scan did not finish within {timeout}s")
            return
        except Exception as e:
            logger.warning(f"Process scan failed: {e}")
            return

        for instance in instances:
            yield instance
