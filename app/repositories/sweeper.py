"""Periodic deletion of expired results.

Reads already enforce expiry, so the sweep only reclaims space.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Optional

from converter import settings

if TYPE_CHECKING:
    from .base import ResultStore

logger = logging.getLogger("app.repositories.sweeper")


class ResultSweeper:
    """Runs ``store.sweep()`` at startup and then every ``interval`` seconds."""

    def __init__(self, store: "ResultStore", interval: Optional[float] = None):
        self.store = store
        self.interval = interval if interval is not None else settings.RESULT_SWEEP_INTERVAL_SECONDS
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if not self.running:
            self._task = asyncio.create_task(self._run(), name="result-sweeper")
            logger.info("Result sweeper started (interval=%ss)", self.interval)
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Result sweeper stopped")

    async def _run(self) -> None:
        while True:
            try:
                await self.store.sweep()
            except Exception as e:
                logger.warning("Result sweep failed: %s", e)
            await asyncio.sleep(self.interval)
