"""Configuration module for opencode-radar using pydantic-settings."""

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RadarSettings(BaseSettings):
    """Main configuration settings for opencode-radar.

    All settings can be overridden via environment variables with the
    OPENCODE_RADAR_ prefix. For example, OPENCODE_RADAR_DISCOVERY_TIMEOUT
    will override the discovery_timeout setting.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8765

    # Discovery
    discovery_timeout: float = 5.0

    mdns_enabled: bool = True
    mdns_service_type: str = "_http._tcp.local."
    mdns_name_match: str = "opencode"

    proc_enabled: bool = True

    port_probe_enabled: bool = True
    probe_host: str = "127.0.0.1"
    probe_ports: list[int] = Field(default_factory=lambda: [4096])
    probe_connect_timeout: float = 0.5

    # Instance status endpoint
    status_host: str = "localhost"
    status_path: str = "/api/session/status"
    status_timeout: float = 2.0

    # OpenCode storage root; OPENCODE_TEST_HOME is honoured like OpenCode does
    storage_home: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "OPENCODE_RADAR_STORAGE_HOME", "OPENCODE_TEST_HOME"
        ),
    )

    # Home directory holding the OpenCode config files
    config_home: str | None = None

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="OPENCODE_RADAR_",
        populate_by_name=True,
    )

    # --- Resolved paths ---

    @property
    def resolved_storage_dir(self) -> Path:
        """Get the full path to the OpenCode storage directory."""
        if self.storage_home:
            return Path(self.storage_home) / "storage"
        return Path.home() / ".local" / "share" / "opencode" / "storage"

    @property
    def resolved_config_home(self) -> Path:
        """Get the home directory searched for OpenCode config files."""
        if self.config_home:
            return Path(self.config_home)
        return Path.home()
