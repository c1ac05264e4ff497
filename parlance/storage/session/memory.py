"""In-memory session store, for tests and single-process deployments."""

from __future__ import annotations

import datetime
import typing as t

from parlance.core.provider import TimestampProvider, utcnow
from parlance.model import Session, SessionID

from .store import StoreStats


class _Entry(t.NamedTuple):
    snapshot: str
    active: bool
    last_activity: datetime.datetime


class InMemorySessionStore(object):
    """Keep serialized snapshots in a dict.

    Snapshots are stored as JSON, so neither the caller's object nor any copy
    handed out by `get` shares state with what is stored.
    """

    def __init__(self, clock: TimestampProvider = utcnow) -> None:
        self._clock = clock
        self._entries: dict[SessionID, _Entry] = {}

    async def get(self, session_id: SessionID) -> Session | None:
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        self._entries[session_id] = entry._replace(last_activity=self._clock())
        return Session.model_validate_json(entry.snapshot)

    async def put(self, session_id: SessionID, session: Session) -> None:
        self._entries[session_id] = _Entry(
            snapshot=session.model_dump_json(),
            active=session.is_active,
            last_activity=self._clock(),
        )

    async def delete(self, session_id: SessionID) -> bool:
        return self._entries.pop(session_id, None) is not None

    async def sweep(self, idle_threshold: int, *, exclude: t.Collection[SessionID] = ()) -> list[SessionID]:
        cutoff = self._clock() - datetime.timedelta(milliseconds=idle_threshold)
        expired = [
            sid for sid, entry in self._entries.items() if entry.last_activity < cutoff and sid not in exclude
        ]
        for sid in expired:
            del self._entries[sid]
        return expired

    async def stats(self) -> StoreStats:
        return StoreStats(
            total=len(self._entries),
            active=sum(1 for entry in self._entries.values() if entry.active),
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._entries
