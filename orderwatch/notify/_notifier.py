"""
Transition notifier: per-poller status comparator.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from orderwatch._types import OrderId
from orderwatch.order import Order, OrderStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Transition:
    """One observed status change."""

    order_id: OrderId
    old: OrderStatus
    new: OrderStatus

    @property
    def is_terminal(self) -> bool:
        return self.new.is_terminal


type Listener = Callable[[Transition], None]


class TransitionNotifier:
    """
    Holds the last-observed status per order id and emits a Transition
    exactly once per change.

    The held status is updated before any listener runs, so a listener
    that re-enters observe() with the same status sees no change.
    The first sighting of an id is recorded silently unless seeded.

    Example:
        notifier = TransitionNotifier()
        notifier.subscribe(lambda t: print(f"#{t.order_id}: {t.old.name} → {t.new.name}"))
        notifier.seed(7, OrderStatus.PENDING)
        notifier.observe(7, OrderStatus.PROCESSING)  # emits
        notifier.observe(7, OrderStatus.PROCESSING)  # silent
    """

    __slots__ = ("_last", "_listeners")

    def __init__(self) -> None:
        self._last: dict[OrderId, OrderStatus] = {}
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener. Returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def seed(self, order_id: OrderId, status: OrderStatus) -> None:
        """Set the baseline status without emitting."""
        self._last[order_id] = status

    def observe(self, order_id: OrderId, status: OrderStatus) -> Transition | None:
        old = self._last.get(order_id)
        self._last[order_id] = status
        if old is None or old is status:
            return None

        transition = Transition(order_id, old, status)
        logger.info("order %s: %s -> %s", order_id, old.name, status.name)
        for listener in tuple(self._listeners):
            try:
                listener(transition)
            except Exception:
                logger.exception("transition listener failed for order %s", order_id)
        return transition

    def observe_order(self, order: Order) -> Transition | None:
        return self.observe(order.id, order.status)

    def last_status(self, order_id: OrderId) -> OrderStatus | None:
        return self._last.get(order_id)

    def forget(self, order_id: OrderId) -> None:
        self._last.pop(order_id, None)


__all__ = ("Transition", "Listener", "TransitionNotifier")
