"""Redis implementation of the session store."""

from __future__ import annotations

import datetime
import logging
import typing as t

import redis.asyncio as redis

from parlance.core.logging import TRACE
from parlance.core.provider import TimestampProvider, utcnow
from parlance.model import Session, SessionID

from .store import StoreStats

logger = logging.getLogger(__name__)


class RedisSessionStore(object):
    """Session store on Redis.

    Layout, under a configurable prefix:
    - `{prefix}:session:{id}`: JSON snapshot of the session
    - `{prefix}:activity`: sorted set of session ids scored by last-activity epoch seconds
    - `{prefix}:active`: set of session ids whose status is active
    """

    def __init__(
        self,
        client: redis.Redis,  # type: ignore[type-arg]
        prefix: str = "parlance",
        clock: TimestampProvider = utcnow,
    ) -> None:
        self._client = client
        self._prefix = prefix
        self._clock = clock

    def _session_key(self, session_id: SessionID | str) -> str:
        return f"{self._prefix}:session:{session_id}"

    @property
    def _activity_key(self) -> str:
        return f"{self._prefix}:activity"

    @property
    def _active_key(self) -> str:
        return f"{self._prefix}:active"

    def _now(self) -> float:
        return self._clock().timestamp()

    async def get(self, session_id: SessionID) -> Session | None:
        raw = await self._client.get(self._session_key(session_id))
        if raw is None:
            return None
        await self._client.zadd(self._activity_key, {str(session_id): self._now()})
        return Session.model_validate_json(raw)

    async def put(self, session_id: SessionID, session: Session) -> None:
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.set(self._session_key(session_id), session.model_dump_json())
            pipe.zadd(self._activity_key, {str(session_id): self._now()})
            if session.is_active:
                pipe.sadd(self._active_key, str(session_id))
            else:
                pipe.srem(self._active_key, str(session_id))
            await pipe.execute()
        logger.log(TRACE, "session stored", extra={"session_id": session_id, "active": session.is_active})

    async def delete(self, session_id: SessionID) -> bool:
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.delete(self._session_key(session_id))
            pipe.zrem(self._activity_key, str(session_id))
            pipe.srem(self._active_key, str(session_id))
            deleted, *_ = await pipe.execute()
        return bool(deleted)

    async def sweep(self, idle_threshold: int, *, exclude: t.Collection[SessionID] = ()) -> list[SessionID]:
        cutoff = self._clock() - datetime.timedelta(milliseconds=idle_threshold)
        # exclusive upper bound: only sessions idle for longer than the threshold
        members = await self._client.zrangebyscore(self._activity_key, "-inf", f"({cutoff.timestamp()}")
        excluded = {str(sid) for sid in exclude}

        expired: list[SessionID] = []
        for member in members:
            sid = member.decode("utf-8") if isinstance(member, bytes) else str(member)
            if sid in excluded:
                continue
            await self.delete(SessionID(sid))
            expired.append(SessionID(sid))
        return expired

    async def stats(self) -> StoreStats:
        async with self._client.pipeline(transaction=False) as pipe:
            pipe.zcard(self._activity_key)
            pipe.scard(self._active_key)
            total, active = await pipe.execute()
        return StoreStats(total=int(total), active=int(active))
