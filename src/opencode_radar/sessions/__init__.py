"""Session listing and live status for opencode-radar.

This package reads persisted OpenCode sessions from disk and polls running
instances for the live state of their sessions.
"""

from opencode_radar.sessions.active import (
    StatusPoller,
    parse_status_entry,
    poll_statuses,
)
from opencode_radar.sessions.filter import SessionFilter, filter_sessions
from opencode_radar.sessions.store import (
    SessionStore,
    format_sessions_table,
    matches_pattern,
)
from opencode_radar.sessions.types import (
    SessionState,
    SessionStatus,
    SessionSummary,
    SessionTime,
    StoredSession,
)

__all__ = [
    # Core classes
    "SessionStore",
    "StatusPoller",
    # Functions
    "filter_sessions",
    "format_sessions_table",
    "matches_pattern",
    "parse_status_entry",
    "poll_statuses",
    # Types
    "SessionFilter",
    "SessionState",
    "SessionStatus",
    "SessionSummary",
    "SessionTime",
    "StoredSession",
]
