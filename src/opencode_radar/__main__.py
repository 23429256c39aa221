"""CLI entry point for opencode-radar.

This module provides the command-line interface. It can be invoked as
`opencode-radar` (via the script entry point) or `python -m opencode_radar`.

Subcommands:
    serve      Start the HTTP inventory API
    list       List sessions stored on disk
    instances  Discover running instances
    active     Show live session statuses of running instances
    zeroconf   Enable mDNS advertisement in the OpenCode config
"""

import argparse
import asyncio
import logging
import sys

from opencode_radar import __version__
from opencode_radar.config import RadarSettings
from opencode_radar.sensors import CacheSensor, build_sensors, distinct_instances
from opencode_radar.services import OpencodeConfigService
from opencode_radar.sessions import (
    SessionFilter,
    SessionStore,
    filter_sessions,
    format_sessions_table,
    poll_statuses,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="opencode-radar",
        description="Find running OpenCode instances and their live sessions",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"opencode-radar {__version__}",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, can be set via OPENCODE_RADAR_LOG_LEVEL)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Start the HTTP inventory API")
    serve.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: 127.0.0.1, can be set via OPENCODE_RADAR_HOST)",
    )
    serve.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: 8765, can be set via OPENCODE_RADAR_PORT)",
    )
    serve.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development (uvicorn --reload)",
    )

    list_cmd = subparsers.add_parser("list", help="List all OpenCode sessions")
    list_cmd.add_argument(
        "-d",
        "--dir",
        type=str,
        default=None,
        help="Filter sessions by directory pattern",
    )

    instances = subparsers.add_parser("instances", help="Discover running instances")
    instances.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-sensor discovery timeout in seconds",
    )

    active = subparsers.add_parser("active", help="Show live session statuses")
    active.add_argument("--busy", action="store_true", help="Only busy sessions")
    active.add_argument("--idle", action="store_true", help="Only idle sessions")
    active.add_argument("--retrying", action="store_true", help="Only retrying sessions")
    active.add_argument(
        "--session-id",
        type=str,
        default=None,
        help="Only sessions whose ID contains this string",
    )
    active.add_argument(
        "--min-retry-attempt",
        type=int,
        default=None,
        help="Only retrying sessions at or past this attempt",
    )
    active.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-sensor discovery timeout in seconds",
    )

    subparsers.add_parser(
        "zeroconf", help="Enable mDNS zeroconf setting in OpenCode config"
    )

    return parser


def run_list(settings: RadarSettings, dir_pattern: str | None) -> int:
    store = SessionStore(settings.resolved_storage_dir)
    table = format_sessions_table(store.list_sessions(dir_pattern=dir_pattern))
    if table:
        print(table)
    return 0


async def run_instances(settings: RadarSettings, timeout: float | None) -> int:
    cache = CacheSensor(build_sensors(settings))
    window = timeout if timeout is not None else settings.discovery_timeout

    print("port\tsource\tpid\thostname\tcwd")
    try:
        async for instance in distinct_instances(cache.discover(window)):
            print(
                f"{instance.port}\t{instance.source.value}\t{instance.pid or ''}"
                f"\t{instance.hostname or ''}\t{instance.cwd or ''}"
            )
    finally:
        cache.stop()
    return 0


async def run_active(
    settings: RadarSettings, criteria: SessionFilter, timeout: float | None
) -> int:
    cache = CacheSensor(build_sensors(settings))
    window = timeout if timeout is not None else settings.discovery_timeout

    statuses = filter_sessions(
        poll_statuses(
            distinct_instances(
                cache.discover(window), key=lambda instance: instance.port
            ),
            host=settings.status_host,
            path=settings.status_path,
            timeout=settings.status_timeout,
        ),
        criteria,
    )

    print("session\tport\tstate\tattempt\tmessage")
    try:
        async for status in statuses:
            attempt = "" if status.retry_attempt is None else status.retry_attempt
            print(
                f"{status.session_id}\t{status.port}\t{status.state.value}"
                f"\t{attempt}\t{status.retry_message or ''}"
            )
    finally:
        cache.stop()
    return 0


def run_zeroconf(settings: RadarSettings) -> int:
    service = OpencodeConfigService(settings.resolved_config_home)
    target = service.enable_mdns()
    print(f"Enabled mdns in {target}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the opencode-radar CLI.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        int: Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    # Build settings, CLI args override environment variables
    settings_kwargs = {}
    if args.log_level is not None:
        settings_kwargs["log_level"] = args.log_level
    if args.command == "serve":
        if args.host is not None:
            settings_kwargs["host"] = args.host
        if args.port is not None:
            settings_kwargs["port"] = args.port

    settings = RadarSettings(**settings_kwargs)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command == "serve":
        import uvicorn

        from opencode_radar import create_app

        uvicorn.run(
            create_app(settings=settings),
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
            reload=args.reload,
        )
        return 0

    if args.command == "list":
        return run_list(settings, args.dir)

    if args.command == "instances":
        return asyncio.run(run_instances(settings, args.timeout))

    if args.command == "active":
        criteria = SessionFilter(
            busy=args.busy,
            idle=args.idle,
            retrying=args.retrying,
            session_id_pattern=args.session_id,
            min_retry_attempt=args.min_retry_attempt,
        )
        return asyncio.run(run_active(settings, criteria, args.timeout))

    return run_zeroconf(settings)


if __name__ == "__main__":
    sys.exit(main())
