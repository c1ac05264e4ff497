"""Per-session mutual exclusion."""

from __future__ import annotations

import asyncio
import contextlib
import typing as t
import weakref

from parlance.model import SessionID


class SessionLocks(object):
    """Registry of one `asyncio.Lock` per session id.

    Locks are weakly held: a lock lives only while some operation holds or
    awaits it, so the registry does not grow with the number of sessions ever
    seen. Operations on different sessions never contend.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[SessionID, asyncio.Lock] = weakref.WeakValueDictionary()

    def lock(self, session_id: SessionID) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    @contextlib.asynccontextmanager
    async def hold(self, session_id: SessionID) -> t.AsyncIterator[None]:
        lock = self.lock(session_id)
        async with lock:
            yield

    def is_busy(self, session_id: SessionID) -> bool:
        lock = self._locks.get(session_id)
        return lock is not None and lock.locked()

    def busy(self) -> frozenset[SessionID]:
        """Sessions with an operation in flight."""
        return frozenset(sid for sid, lock in list(self._locks.items()) if lock.locked())

    def __len__(self) -> int:
        return len(self._locks)
