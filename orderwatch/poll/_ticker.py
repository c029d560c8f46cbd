"""
Ticker: the scoped timer handle a poller owns.

A ticker is one asyncio task: sleep(interval), call on_tick(), repeat.
on_tick is synchronous; work it starts runs in its own task, so a slow
fetch never delays the schedule, it only makes the poller skip ticks.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from orderwatch._types import Sleep

logger = logging.getLogger(__name__)


class Ticker:
    """
    Fixed-rate logical timer with explicit start/stop.

    start() and stop() are idempotent. stop() cancels the task at once;
    aclose() additionally waits until every task this ticker ever
    cancelled has finished, so nothing outlives the owner.

    Example:
        async with Ticker(3.0, on_tick) as ticker:
            ...
        # stopped and released here
    """

    __slots__ = ("_interval", "_on_tick", "_sleep", "_name", "_task", "_retired", "ticks")

    def __init__(
        self,
        interval: float,
        on_tick: Callable[[], None],
        *,
        sleep: Sleep = asyncio.sleep,
        name: str = "ticker",
    ) -> None:
        self._interval = interval
        self._on_tick = on_tick
        self._sleep = sleep
        self._name = name
        self._task: asyncio.Task[None] | None = None
        self._retired: set[asyncio.Task[None]] = set()
        self.ticks = 0

    @property
    def armed(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        """Arm the timer. Returns False if it was already armed."""
        if self.armed:
            return False
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self._name)
        logger.debug("%s armed (every %.3fs)", self._name, self._interval)
        return True

    def stop(self) -> bool:
        """Disarm the timer. Returns False if it was not armed."""
        task, self._task = self._task, None
        if task is None or task.done():
            return False
        task.cancel()
        self._retired.add(task)
        task.add_done_callback(self._retired.discard)
        logger.debug("%s disarmed", self._name)
        return True

    async def aclose(self) -> None:
        self.stop()
        current = asyncio.current_task()
        pending = [t for t in self._retired if t is not current]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _run(self) -> None:
        while True:
            await self._sleep(self._interval)
            self.ticks += 1
            self._on_tick()

    async def __aenter__(self) -> Ticker:
        self.start()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


__all__ = ("Ticker",)
