"""Periodic eviction of idle sessions."""

from __future__ import annotations

import asyncio
import logging

from .engine import AssessmentEngine

logger = logging.getLogger(__name__)


class SessionSweeper(object):
    """Run `AssessmentEngine.sweep_expired` on a fixed interval in a background task."""

    def __init__(self, engine: AssessmentEngine, interval: float = 60.0) -> None:
        self.engine = engine
        self.interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.engine.sweep_expired()
            except Exception:
                # a failed sweep is retried on the next tick
                logger.exception("session sweep failed")

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self.run(), name="parlance-sweeper")
        logger.debug("session sweeper started", extra={"interval": self.interval})

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("session sweeper stopped")

    async def __aenter__(self) -> SessionSweeper:
        self.start()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.stop()
