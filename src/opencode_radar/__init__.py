"""opencode-radar: find running OpenCode instances and their live sessions.

This package merges several discovery mechanisms (mDNS, the process table
and port probes) into one deduplicated instance stream, polls each
instance for session activity, and serves the result over HTTP.
"""

__version__ = "0.1.0"

from opencode_radar.app import create_app  # noqa: E402

__all__ = ["create_app", "__version__"]
