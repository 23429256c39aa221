"""Service layer for opencode-radar.

This package contains services that manage files outside the core
discovery engine.
"""

from opencode_radar.services.opencode_config import OpencodeConfigService

__all__ = ["OpencodeConfigService"]
