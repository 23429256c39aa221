"""Filtering of live session status streams."""

from dataclasses import dataclass
from typing import AsyncIterator, Callable

from opencode_radar.sessions.types import SessionState, SessionStatus

SessionPredicate = Callable[[SessionStatus], bool]


@dataclass
class SessionFilter:
    """Criteria for selecting session statuses.

    All set criteria must hold. State flags are conjunctive, so setting
    more than one of them matches nothing. Records without a retry attempt
    pass the min_retry_attempt check.
    """

    busy: bool = False
    idle: bool = False
    retrying: bool = False
    session_id_pattern: str | None = None
    min_retry_attempt: int | None = None
    port: int | None = None

    def matches(self, status: SessionStatus) -> bool:
        if self.busy and status.state is not SessionState.BUSY:
            return False
        if self.idle and status.state is not SessionState.IDLE:
            return False
        if self.retrying and status.state is not SessionState.RETRY:
            return False
        if (
            self.session_id_pattern is not None
            and self.session_id_pattern not in status.session_id
        ):
            return False
        if (
            self.min_retry_attempt is not None
            and status.retry_attempt is not None
            and status.retry_attempt < self.min_retry_attempt
        ):
            return False
        if self.port is not None and status.port != self.port:
            return False
        return True


async def filter_sessions(
    sessions: AsyncIterator[SessionStatus],
    criteria: SessionFilter | SessionPredicate,
) -> AsyncIterator[SessionStatus]:
    """Yield the session statuses that match the criteria.

    Args:
        sessions: Stream of session statuses
        criteria: A SessionFilter or any predicate over SessionStatus

    Yields:
        SessionStatus: Matching records, in input order
    """
    predicate = criteria.matches if isinstance(criteria, SessionFilter) else criteria
    async for status in sessions:
        if predicate(status):
            yield status
