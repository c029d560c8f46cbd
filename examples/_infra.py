"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal

from kungfu import LazyCoroResult, Result, Ok, Error
from combinators import lift as L

from orderwatch.fetch import FetchError, FetchFailure, FetchFailureKind
from orderwatch.order import LineItem, Order, OrderStatus


# Fake storefront
@dataclass(slots=True)
class FakeShop:
    """
    In-memory order service. Every order walks its own status script,
    one step per `step_every` seconds, regardless of who is watching.
    """

    step_every: float = 0.5
    latency: float = 0.05
    down: bool = False
    _orders: dict[int, Order] = field(default_factory=dict, init=False)
    _scripts: dict[int, list[OrderStatus]] = field(default_factory=dict, init=False)
    _next_id: int = field(default=1, init=False)

    def place(self, product: str, price: str, *script: OrderStatus) -> Order:
        order_id, self._next_id = self._next_id, self._next_id + 1
        item = LineItem(product_id=order_id * 10, quantity=1, price=Decimal(price), product_name=product)
        order = Order(
            id=order_id,
            status=OrderStatus.PENDING,
            created_at=datetime.now(),
            total=item.line_total,
            items=(item,),
            user_id=1,
        )
        self._orders[order_id] = order
        self._scripts[order_id] = list(script)
        return order

    async def run(self) -> None:
        while True:
            await asyncio.sleep(self.step_every)
            for order_id, script in self._scripts.items():
                if script:
                    order = self._orders[order_id]
                    self._orders[order_id] = replace(order, status=script.pop(0), updated_at=datetime.now())

    async def _get(self, order_id: int) -> Order:
        await asyncio.sleep(self.latency)
        if self.down:
            raise ConnectionError("shop unreachable")
        if order_id not in self._orders:
            raise LookupError(f"Order {order_id} not found")
        return self._orders[order_id]

    async def _list(self) -> tuple[Order, ...]:
        await asyncio.sleep(self.latency)
        if self.down:
            raise ConnectionError("shop unreachable")
        return tuple(sorted(self._orders.values(), key=lambda o: o.id, reverse=True))


def _failure(exc: Exception) -> FetchError:
    if isinstance(exc, LookupError):
        return FetchFailure(FetchFailureKind.HTTP, str(exc), status_code=404)
    return FetchFailure(FetchFailureKind.TRANSPORT, str(exc))


@dataclass(frozen=True, slots=True)
class ShopFetcher:
    """OrderFetcher over a FakeShop."""

    shop: FakeShop

    def fetch_one(self, order_id: int) -> LazyCoroResult[Order, FetchError]:
        return L.catching_async(lambda: self.shop._get(order_id), on_error=_failure)

    def fetch_many(self) -> LazyCoroResult[tuple[Order, ...], FetchError]:
        return L.catching_async(self.shop._list, on_error=_failure)


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def show(result: Result[object, object]) -> None:
    match result:
        case Ok(value):
            print(f"  Ok: {value}")
        case Error(e):
            print(f"  Error: {e}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    asyncio.run(main())
