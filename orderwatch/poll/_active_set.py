"""
Active-set poller: an order collection, while any member is active.

    refresh ──► Ok(orders) ──► any active? ──► yes: keep/arm timer
       ▲                                   └─► no:  disarm timer
       │        Error(e)   ──► record error, disarm (no retry)
       │
    start() / tick / retry()

The arm/disarm decision is re-made after every refresh and after every
notify_mutation(), never only at start.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from kungfu import Result, Ok, Error

from orderwatch._types import Sleep
from orderwatch.fetch import FetchError, OrderFetcher, guarded
from orderwatch.notify import TransitionNotifier
from orderwatch.order import Order
from orderwatch.poll._options import PollOptions
from orderwatch.poll._ticker import Ticker

logger = logging.getLogger(__name__)


class ActiveSetPoller:
    """
    Polls fetcher.fetch_many() while the latest collection has an active member.

    start() refreshes immediately and arms the timer from the collection
    it already holds. stop() is definitive: later mutations are still
    folded in but never re-arm until start() or retry() is called.

    Example:
        poller = ActiveSetPoller(fetcher)
        poller.transitions.subscribe(show_banner)
        async with poller:
            ...
            poller.notify_mutation(created_order)  # arms at once if active
    """

    def __init__(
        self,
        fetcher: OrderFetcher,
        *,
        initial: Iterable[Order] = (),
        options: PollOptions = PollOptions(),
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._fetcher = fetcher
        self._orders: tuple[Order, ...] = tuple(initial)
        self._error: FetchError | None = None
        self._stopped = True
        self._inflight: asyncio.Task[None] | None = None
        self._ticker = Ticker(options.interval, self._on_tick, sleep=sleep, name="active-set-poller")
        self.fetches = 0
        self.transitions = TransitionNotifier()
        for order in self._orders:
            self.transitions.seed(order.id, order.status)

    # ─── handle ───────────────────────────────────────────────────────────────

    @property
    def latest_collection(self) -> tuple[Order, ...]:
        return self._orders

    @property
    def has_active_member(self) -> bool:
        return any(order.is_active for order in self._orders)

    @property
    def is_polling(self) -> bool:
        return self._ticker.armed

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    @property
    def error(self) -> FetchError | None:
        return self._error

    def start(self) -> None:
        """(Re)start: clear any error, refresh now, arm from the held collection."""
        self._stopped = False
        self._error = None
        self._spawn_refresh()
        self._reconcile()

    def retry(self) -> None:
        """Explicit re-arm after a failed refresh."""
        self.start()

    def stop(self) -> None:
        self._stopped = True
        self._ticker.stop()

    async def refresh(self) -> Result[tuple[Order, ...], FetchError]:
        """
        Refresh now and wait for it.

        Joins the in-flight refresh if there is one instead of starting
        a second request.
        """
        self._spawn_refresh()
        task = self._inflight
        if task is not None:
            await asyncio.shield(task)
        if self._error is not None:
            return Error(self._error)
        return Ok(self._orders)

    def notify_mutation(self, order: Order) -> None:
        """Fold an externally created/changed order in and re-evaluate at once."""
        for index, existing in enumerate(self._orders):
            if existing.id == order.id:
                self._orders = (*self._orders[:index], order, *self._orders[index + 1:])
                break
        else:
            self._orders = (order, *self._orders)
        self.transitions.observe_order(order)
        self._reconcile()

    async def aclose(self) -> None:
        """Stop and wait for the timer and any in-flight refresh to settle."""
        self.stop()
        await self._ticker.aclose()
        if self._inflight is not None:
            await asyncio.gather(self._inflight, return_exceptions=True)

    async def __aenter__(self) -> ActiveSetPoller:
        self.start()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    # ─── internals ────────────────────────────────────────────────────────────

    def _on_tick(self) -> None:
        self._spawn_refresh()

    def _spawn_refresh(self) -> None:
        if self._inflight is not None and not self._inflight.done():
            logger.debug("refresh in flight, tick skipped")
            return
        self.fetches += 1
        self._inflight = asyncio.get_running_loop().create_task(
            self._refresh(), name="active-set-refresh"
        )

    async def _refresh(self) -> None:
        result = await guarded(self._fetcher.fetch_many)
        match result:
            case Ok(orders):
                self._orders = orders
                self._error = None
                for order in orders:
                    self.transitions.observe_order(order)
                self._reconcile()
            case Error(e):
                logger.warning("order list refresh failed, polling disabled: %s", e)
                self._error = e
                self._ticker.stop()

    def _reconcile(self) -> None:
        # A failed refresh stays disarmed until start()/retry().
        if self._stopped or self._error is not None:
            return
        if self.has_active_member:
            self._ticker.start()
        elif self._ticker.stop():
            logger.info("no active orders left, polling stopped")


__all__ = ("ActiveSetPoller",)
