"""Session store protocol."""

from __future__ import annotations

import typing as t

import typing_extensions as te

from parlance.model import Session, SessionID


class StoreStats(te.TypedDict):
    total: int
    active: int


class SessionStore(t.Protocol):
    """Protocol for session persistence.

    Implementations must support:
    - Full-snapshot writes; a `put` replaces whatever was stored under the id
    - Reads returning a private copy, which also mark the session as active now
    - Sweeping sessions idle for longer than a threshold
    """

    async def get(self, session_id: SessionID) -> Session | None:
        """Load a copy of the session, refreshing its last-activity time.

        Returns:
            The session, or None if the id is unknown or was swept.
        """
        ...

    async def put(self, session_id: SessionID, session: Session) -> None:
        """Store a snapshot of the session and refresh its last-activity time."""
        ...

    async def delete(self, session_id: SessionID) -> bool:
        """Remove the session.

        Returns:
            True if something was removed.
        """
        ...

    async def sweep(self, idle_threshold: int, *, exclude: t.Collection[SessionID] = ()) -> list[SessionID]:
        """Remove sessions idle for longer than `idle_threshold` milliseconds.

        Args:
            idle_threshold: Idle time in milliseconds
            exclude: Sessions to keep regardless of idle time, e.g. those with an operation in flight

        Returns:
            The ids removed.
        """
        ...

    async def stats(self) -> StoreStats:
        """Count stored sessions, and those among them whose status is active."""
        ...
