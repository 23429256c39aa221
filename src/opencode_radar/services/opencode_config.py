"""OpenCode config file management.

This module provides the OpencodeConfigService class which turns on mDNS
advertisement in the user's OpenCode configuration so that the mDNS
sensor can find running servers.
"""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_SCHEMA_URL = "https://opencode.ai/config.json"


class OpencodeConfigService:
    """Reads and updates the OpenCode config file.

    Two locations are recognised: ~/.config/opencode/opencode.json and
    ~/.opencode/opencode.json.
    """

    def __init__(self, home: Path):
        """Initialize the OpencodeConfigService.

        Args:
            home: Home directory under which the config files live
        """
        self.home = home

    @property
    def candidate_paths(self) -> list[Path]:
        return [
            self.home / ".config" / "opencode" / "opencode.json",
            self.home / ".opencode" / "opencode.json",
        ]

    def _read(self, path: Path) -> dict[str, Any]:
        return json.loads(path.read_text(encoding="utf-8"))

    def _has_mdns_setting(self, path: Path) -> bool:
        try:
            config = self._read(path)
        except (OSError, ValueError) as e:
            logger.debug(f"Could not read config {path}: {e}")
            return False
        server = config.get("server") if isinstance(config, dict) else None
        return isinstance(server, dict) and "mdns" in server

    def resolve_target(self) -> Path:
        """Choose the config file to update.

        Preference order: a file that already sets server.mdns, then the
        only existing file, then the first candidate location.

        Returns:
            Path: The config file to write
        """
        paths = self.candidate_paths

        for path in paths:
            if path.exists() and self._has_mdns_setting(path):
                return path

        existing = [path for path in paths if path.exists()]
        if len(existing) == 1:
            return existing[0]

        return paths[0]

    def enable_mdns(self) -> Path:
        """Set server.mdns to true in the OpenCode config.

        Returns:
            Path: The file that was written

        Raises:
            json.JSONDecodeError: If the target file exists but is not valid JSON
            ValueError: If the target file holds JSON that is not an object
        """
        target = self.resolve_target()

        config: dict[str, Any] = self._read(target) if target.exists() else {}
        if not isinstance(config, dict):
            raise ValueError(f"Config file {target} does not contain a JSON object")

        server = config.get("server")
        if not isinstance(server, dict):
            server = {}
        server["mdns"] = True
        config["server"] = server
        config.setdefault("$schema", CONFIG_SCHEMA_URL)

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(config, indent=2), encoding="utf-8")

        logger.info(f"Enabled mdns in {target}")
        return target
