"""Data types for OpenCode sessions.

This module defines the persisted session record read from OpenCode's
storage directory and the live status record reported by a running
instance.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class SessionState(str, Enum):
    """Activity state reported by an instance for one session."""

    IDLE = "idle"
    BUSY = "busy"
    RETRY = "retry"


@dataclass(frozen=True)
class SessionStatus:
    """Live status of one session inside one running instance.

    The retry fields are only set when state is RETRY, and even then
    each one is optional.
    """

    session_id: str
    port: int
    state: SessionState
    retry_attempt: int | None = None
    retry_message: str | None = None
    retry_next_at: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "port": self.port,
            "state": self.state.value,
            "retry_attempt": self.retry_attempt,
            "retry_message": self.retry_message,
            "retry_next_at": self.retry_next_at,
        }


@dataclass
class SessionTime:
    """Timestamps of a stored session, in epoch milliseconds."""

    created: int
    updated: int
    compacting: int | None = None
    archived: int | None = None


@dataclass
class SessionSummary:
    """Diff summary of a stored session."""

    additions: int = 0
    deletions: int = 0
    files: int = 0


@dataclass
class StoredSession:
    """A conversation record persisted by OpenCode."""

    id: str
    slug: str
    project_id: str
    directory: str
    title: str
    version: str
    time: SessionTime
    parent_id: str | None = None
    summary: SessionSummary | None = None
    share_url: str | None = None

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "StoredSession":
        """Create a StoredSession from OpenCode's on-disk JSON.

        Args:
            data: Parsed session file contents (camelCase keys)

        Returns:
            StoredSession: The parsed record

        Raises:
            KeyError: If a required field is missing
            TypeError: If a nested object has the wrong shape
        """
        time_data = data["time"]
        summary_data = data.get("summary")
        share_data = data.get("share") or {}

        return StoredSession(
            id=data["id"],
            slug=data.get("slug", ""),
            project_id=data.get("projectID", ""),
            directory=data["directory"],
            title=data.get("title", ""),
            version=data.get("version", ""),
            time=SessionTime(
                created=time_data["created"],
                updated=time_data["updated"],
                compacting=time_data.get("compacting"),
                archived=time_data.get("archived"),
            ),
            parent_id=data.get("parentID"),
            summary=SessionSummary(**summary_data) if summary_data else None,
            share_url=share_data.get("url"),
        )
