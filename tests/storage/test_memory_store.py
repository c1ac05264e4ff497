"""Tests for the in-memory session store."""

from __future__ import annotations

import typing as t

import pytest

from parlance.assessment import SessionStateManager
from parlance.model import Phase, SessionStatus
from parlance.storage.session import InMemorySessionStore


class TestInMemorySessionStore(object):
    @pytest.mark.anyio
    async def test_get_unknown(self, store: InMemorySessionStore, states: SessionStateManager) -> None:
        assert await store.get(states.create().session_id) is None

    @pytest.mark.anyio
    async def test_put_then_get_returns_copy(self, store: InMemorySessionStore, states: SessionStateManager) -> None:
        """Neither the stored object nor the loaded one share state with the caller."""
        session = states.create()
        await store.put(session.session_id, session)
        session.phase = Phase.Task

        loaded = await store.get(session.session_id)
        assert loaded is not None
        assert loaded.phase is Phase.Init

        loaded.metadata.interruptions = 5
        again = await store.get(session.session_id)
        assert again is not None
        assert again.metadata.interruptions == 0

    @pytest.mark.anyio
    async def test_put_replaces(self, store: InMemorySessionStore, states: SessionStateManager) -> None:
        session = states.create()
        await store.put(session.session_id, session)
        session.turn_index = 4
        await store.put(session.session_id, session)

        loaded = await store.get(session.session_id)
        assert loaded is not None
        assert loaded.turn_index == 4
        assert len(store) == 1

    @pytest.mark.anyio
    async def test_delete(self, store: InMemorySessionStore, states: SessionStateManager) -> None:
        session = states.create()
        await store.put(session.session_id, session)

        assert await store.delete(session.session_id)
        assert not await store.delete(session.session_id)
        assert session.session_id not in store

    @pytest.mark.anyio
    async def test_sweep_threshold_is_exclusive(
        self, store: InMemorySessionStore, states: SessionStateManager, clock: t.Any
    ) -> None:
        """Only sessions idle strictly longer than the threshold are removed."""
        session = states.create()
        await store.put(session.session_id, session)

        clock.advance(ms=1000)
        assert await store.sweep(1000) == []
        clock.advance(ms=1)
        assert await store.sweep(1000) == [session.session_id]
        assert len(store) == 0

    @pytest.mark.anyio
    async def test_get_refreshes_activity(
        self, store: InMemorySessionStore, states: SessionStateManager, clock: t.Any
    ) -> None:
        session = states.create()
        await store.put(session.session_id, session)
        clock.advance(ms=900)
        await store.get(session.session_id)
        clock.advance(ms=900)

        assert await store.sweep(1000) == []

    @pytest.mark.anyio
    async def test_sweep_respects_exclude(
        self, store: InMemorySessionStore, states: SessionStateManager, clock: t.Any
    ) -> None:
        a, b = states.create(), states.create()
        await store.put(a.session_id, a)
        await store.put(b.session_id, b)
        clock.advance(ms=5000)

        assert await store.sweep(1000, exclude={a.session_id}) == [b.session_id]
        assert a.session_id in store

    @pytest.mark.anyio
    async def test_stats(self, store: InMemorySessionStore, states: SessionStateManager) -> None:
        active, ended = states.create(), states.create()
        ended.status = SessionStatus.Ended
        await store.put(active.session_id, active)
        await store.put(ended.session_id, ended)

        assert await store.stats() == {"total": 2, "active": 1}
