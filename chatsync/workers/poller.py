"""Periodic reconciliation driver."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from chatsync.config import settings

logger = logging.getLogger(__name__)


class Poller:
    """Runs a coroutine on a fixed interval without overlapping runs.

    Each tick starts the cycle as its own task, so a slow cycle never delays
    the timer. A tick that fires while a cycle is still in flight is skipped,
    not queued. Errors raised by a cycle are logged and never stop the timer.
    """

    def __init__(
        self,
        callback: Callable[[], Awaitable[object]],
        interval: float | None = None,
        name: str = "reconciliation",
    ):
        self.callback = callback
        self.interval = settings.POLL_INTERVAL_SECONDS if interval is None else interval
        self.name = name
        self._timer: asyncio.Task | None = None
        self._cycles: set[asyncio.Task] = set()
        self._in_flight = False

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def start(self) -> None:
        """Start (or restart) the timer. Must be called from a running loop."""
        self.stop()
        self._timer = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"Started {self.name} poller every {self.interval}s")

    def stop(self) -> None:
        """Cancel the timer. In-flight cycles are left to finish."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.info(f"Stopped {self.name} poller")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            task = asyncio.create_task(self.tick())
            self._cycles.add(task)
            task.add_done_callback(self._cycles.discard)

    async def tick(self) -> bool:
        """Run one cycle unless one is already running. Returns whether it ran."""
        if self._in_flight:
            logger.debug(f"Skipping {self.name} tick: previous cycle still running")
            return False

        self._in_flight = True
        try:
            await self.callback()
        except Exception as e:
            logger.error(f"Error in {self.name} cycle: {e}", exc_info=True)
        finally:
            self._in_flight = False
        return True

    async def wait_idle(self) -> None:
        """Wait for cycles that are already running to finish."""
        if self._cycles:
            await asyncio.gather(*list(self._cycles), return_exceptions=True)
