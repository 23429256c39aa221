"""Read-only access to OpenCode's persisted sessions.

OpenCode stores one JSON file per session under
<storage>/session/<project id>/<session id>.json. This module lists those
records, filters them by working directory and renders them as a table.
"""

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path

from opencode_radar.sessions.types import StoredSession

logger = logging.getLogger(__name__)


def matches_pattern(directory: str, pattern: str) -> bool:
    """Match a session directory against a pattern.

    Without wildcards the comparison is exact. "*" matches any run of
    characters and "?" exactly one; the whole directory must match.

    Args:
        directory: The session's working directory
        pattern: The pattern to match

    Returns:
        bool: True if the directory matches
    """
    if "*" not in pattern and "?" not in pattern:
        return directory == pattern

    regex = "".join(
        ".*" if char == "*" else "." if char == "?" else re.escape(char)
        for char in pattern
    )
    return re.fullmatch(regex, directory, flags=re.DOTALL) is not None


class SessionStore:
    """Lists sessions from an OpenCode storage directory."""

    def __init__(self, storage_dir: Path):
        """Initialize the SessionStore.

        Args:
            storage_dir: OpenCode's storage root (containing "session/")
        """
        self.storage_dir = storage_dir

    @property
    def sessions_dir(self) -> Path:
        return self.storage_dir / "session"

    def list_sessions(self, dir_pattern: str | None = None) -> list[StoredSession]:
        """List stored sessions, newest first.

        Args:
            dir_pattern: Optional pattern the session directory must match

        Returns:
            List of StoredSession objects sorted by updated time descending
        """
        if not self.sessions_dir.is_dir():
            logger.debug(f"No session directory at {self.sessions_dir}")
            return []

        sessions: list[StoredSession] = []

        for project_dir in sorted(self.sessions_dir.iterdir()):
            if not project_dir.is_dir():
                continue

            for file_path in sorted(project_dir.glob("*.json")):
                try:
                    data = json.loads(file_path.read_text(encoding="utf-8"))
                    session = StoredSession.from_dict(data)
                except (OSError, ValueError, KeyError, TypeError) as e:
                    logger.warning(f"Failed to load session file {file_path}: {e}")
                    continue

                if dir_pattern and not matches_pattern(session.directory, dir_pattern):
                    continue

                sessions.append(session)

        sessions.sort(key=lambda s: s.time.updated, reverse=True)

        logger.debug(f"Listed {len(sessions)} stored sessions")
        return sessions


def format_sessions_table(sessions: list[StoredSession]) -> str:
    """Render sessions as a tab-separated table with a header row.

    Args:
        sessions: Sessions to render

    Returns:
        str: The table, or an empty string when there are no sessions
    """
    if not sessions:
        return ""

    lines = ["id\ttitle\tupdated\tdirectory"]
    for session in sessions:
        title = (session.title or "Untitled").replace("\n", "\\n")
        updated = (
            datetime.fromtimestamp(session.time.updated / 1000, tz=timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z")
        )
        lines.append(f"{session.id}\t{title}\t{updated}\t{session.directory}")

    return "\n".join(lines)
