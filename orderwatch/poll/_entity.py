"""
Entity poller: one order, until it reaches a terminal status.
"""

from __future__ import annotations

import asyncio
import logging

from kungfu import Ok, Error

from orderwatch._types import OrderId, Sleep
from orderwatch.fetch import FetchError, OrderFetcher, guarded
from orderwatch.notify import TransitionNotifier
from orderwatch.order import MalformedOrder, Order, OrderStatus
from orderwatch.poll._options import PollOptions
from orderwatch.poll._ticker import Ticker

logger = logging.getLogger(__name__)


class EntityPoller:
    """
    Polls a single order at a fixed interval, from start() until it is terminal.

    Construction decides whether polling is warranted: an order whose
    last-known status is already terminal is finished from the start.
    Nothing runs before start() (or `async with`), so is_polling is False
    until then. start() does one immediate fetch and arms the timer.

    Once finished (terminal status observed, or a fetch failed) the poller
    never fetches again; start() becomes a no-op. A failure keeps the last
    good snapshot and is exposed via .error.

    Example:
        poller = EntityPoller(fetcher, order.id, order.status)
        poller.transitions.subscribe(show_banner)
        async with poller:
            ...
    """

    def __init__(
        self,
        fetcher: OrderFetcher,
        order_id: OrderId,
        initial_status: OrderStatus,
        *,
        options: PollOptions = PollOptions(),
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._fetcher = fetcher
        self._order_id = order_id
        self._snapshot: Order | None = None
        self._error: FetchError | None = None
        self._finished = initial_status.is_terminal
        self._inflight: asyncio.Task[None] | None = None
        self._ticker = Ticker(
            options.interval,
            self._on_tick,
            sleep=sleep,
            name=f"entity-poller:{order_id}",
        )
        self.fetches = 0
        self.transitions = TransitionNotifier()
        self.transitions.seed(order_id, initial_status)

    # ─── handle ───────────────────────────────────────────────────────────────

    @property
    def order_id(self) -> OrderId:
        return self._order_id

    @property
    def latest_snapshot(self) -> Order | None:
        return self._snapshot

    @property
    def error(self) -> FetchError | None:
        return self._error

    @property
    def is_polling(self) -> bool:
        return self._ticker.armed

    @property
    def is_finished(self) -> bool:
        return self._finished

    def start(self) -> None:
        if self._finished:
            logger.debug("order %s: finished, not polling", self._order_id)
            return
        if self._ticker.armed:
            return
        self._spawn_fetch()
        self._ticker.start()

    def stop(self) -> None:
        self._ticker.stop()

    async def aclose(self) -> None:
        """Stop and wait for the timer and any in-flight fetch to settle."""
        self.stop()
        await self._ticker.aclose()
        if self._inflight is not None:
            await asyncio.gather(self._inflight, return_exceptions=True)

    async def __aenter__(self) -> EntityPoller:
        self.start()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    # ─── internals ────────────────────────────────────────────────────────────

    def _on_tick(self) -> None:
        if self._finished:
            self._ticker.stop()
            return
        self._spawn_fetch()

    def _spawn_fetch(self) -> None:
        if self._inflight is not None and not self._inflight.done():
            logger.debug("order %s: fetch in flight, tick skipped", self._order_id)
            return
        self.fetches += 1
        self._inflight = asyncio.get_running_loop().create_task(
            self._fetch(), name=f"entity-fetch:{self._order_id}"
        )

    async def _fetch(self) -> None:
        result = await guarded(lambda: self._fetcher.fetch_one(self._order_id))
        match result:
            case Ok(order) if str(order.id) != str(self._order_id):
                self._fail(MalformedOrder(f"expected order {self._order_id}, got {order.id}", order.id))
            case Ok(order):
                self._snapshot = order
                self._error = None
                self.transitions.observe(self._order_id, order.status)
                if order.is_terminal:
                    logger.info("order %s: %s, polling finished", order.id, order.status.name)
                    self._finish()
            case Error(e):
                self._fail(e)

    def _fail(self, error: FetchError) -> None:
        logger.warning("order %s: fetch failed, polling disabled: %s", self._order_id, error)
        self._error = error
        self._finish()

    def _finish(self) -> None:
        self._finished = True
        self._ticker.stop()


__all__ = ("EntityPoller",)
