"""Background task that triggers periodic flushes.

A lightweight ``asyncio.Task`` awaits the flush callback every *interval*
seconds. The loop tolerates callback errors by logging a warning and
continuing rather than killing the task.
"""

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class FlushScheduler:
    """Cancellable repeating flush.

    Args:
        callback: Coroutine function invoked on each tick.
        interval: Seconds between ticks. The first tick fires one interval
            after ``start()``.
    """

    def __init__(self, callback: Callable[[], Awaitable[None]], interval: float) -> None:
        self._callback = callback
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        """True while the background task is alive."""
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Create the background task, replacing any previous one."""
        await self.stop()
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        """Cancel the background task and wait for it to finish."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self._callback()
            except Exception:
                logger.warning("Periodic flush failed", exc_info=True)
