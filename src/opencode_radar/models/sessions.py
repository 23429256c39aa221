"""Pydantic models for the session endpoints.

This module defines the response schemas for listing stored sessions and
for the live session status view across running instances.
"""

from pydantic import BaseModel, ConfigDict, Field

from opencode_radar.sessions.types import SessionStatus, StoredSession


class StoredSessionItem(BaseModel):
    """A session persisted in OpenCode's storage directory."""

    id: str = Field(description="Session identifier")
    title: str = Field(description="Session title")
    directory: str = Field(description="Working directory of the session")
    project_id: str = Field(description="Project the session belongs to")
    parent_id: str | None = Field(default=None, description="Parent session, if any")
    created: int = Field(description="Creation time in epoch milliseconds")
    updated: int = Field(description="Last update time in epoch milliseconds")

    @classmethod
    def from_session(cls, session: StoredSession) -> "StoredSessionItem":
        return cls(
            id=session.id,
            title=session.title,
            directory=session.directory,
            project_id=session.project_id,
            parent_id=session.parent_id,
            created=session.time.created,
            updated=session.time.updated,
        )


class StoredSessionListResponse(BaseModel):
    """Response body for GET /api/v1/sessions."""

    sessions: list[StoredSessionItem] = Field(default_factory=list)
    count: int


class SessionStatusItem(BaseModel):
    """Live status of one session in a running instance."""

    session_id: str = Field(description="Session identifier")
    port: int = Field(description="Port of the instance reporting the session")
    state: str = Field(description="idle, busy or retry")
    retry_attempt: int | None = Field(default=None, description="Retry attempt number")
    retry_message: str | None = Field(default=None, description="Reason for the retry")
    retry_next_at: int | None = Field(
        default=None,
        description="Next retry time in epoch milliseconds",
    )

    @classmethod
    def from_status(cls, status: SessionStatus) -> "SessionStatusItem":
        return cls(**status.to_dict())


class ActiveSessionListResponse(BaseModel):
    """Response body for GET /api/v1/sessions/active."""

    sessions: list[SessionStatusItem] = Field(default_factory=list)
    count: int

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "sessions": [
                    {
                        "session_id": "ses_4f1a2b",
                        "port": 4096,
                        "state": "retry",
                        "retry_attempt": 2,
                        "retry_message": "rate limited",
                        "retry_next_at": 1760000000000,
                    }
                ],
                "count": 1,
            }
        }
    )
