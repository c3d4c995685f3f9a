import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class ExpiredSessionSweeper:
    """
    Background loop that evicts expired security sessions on a timer.

    sweep_once() -> awaitable returning the number of sessions removed.
    Complements the sweep that runs after every generation.
    """

    def __init__(
        self,
        sweep_once: Callable[[], Awaitable[int]],
        interval_seconds: float = 60,
    ):
        self.sweep_once = sweep_once
        self.interval_seconds = interval_seconds
        self._task = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.running:
            return
        self._task = asyncio.create_task(self._run_forever())
        logger.info(f"Expired session sweeper started (every {self.interval_seconds}s)")

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Expired session sweeper stopped")

    async def _run_forever(self):
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                removed = await self.sweep_once()
                logger.debug(f"Periodic sweep removed {removed} session(s)")
            except Exception:
                logger.exception("Sweeper loop error")
