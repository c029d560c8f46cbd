"""Pytest fixtures for orderwatch tests."""

from __future__ import annotations

import asyncio
from collections import deque
from datetime import datetime
from decimal import Decimal

import pytest
from kungfu import LazyCoroResult, Result

from orderwatch.order import LineItem, Order, OrderStatus


async def settle(rounds: int = 10) -> None:
    """Let every ready task run until the loop goes quiet."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class ManualClock:
    """Sleep that only returns when the test calls tick()."""

    def __init__(self) -> None:
        self._waiters: list[asyncio.Future[None]] = []
        self.requested: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.requested.append(seconds)
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        await waiter

    @property
    def pending(self) -> int:
        """Sleepers still waiting, i.e. armed timers."""
        return sum(1 for w in self._waiters if not w.done())

    async def settle(self) -> None:
        await settle()

    async def tick(self) -> None:
        """Fire every armed timer once, then let the work it started finish."""
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)
        await settle()


class ScriptedFetcher:
    """
    OrderFetcher returning scripted results in order.

    The last scripted result repeats once the script runs out.
    A scripted exception is raised instead of returned.
    Set `gate` to an unset asyncio.Event to hold fetches in flight.
    """

    def __init__(self) -> None:
        self._one: dict[object, deque[Result[Order, object]]] = {}
        self._many: deque[Result[tuple[Order, ...], object]] = deque()
        self.one_calls: list[object] = []
        self.many_calls = 0
        self.gate: asyncio.Event | None = None

    def script_one(self, order_id: object, *results: Result[Order, object]) -> None:
        self._one.setdefault(order_id, deque()).extend(results)

    def script_many(self, *results: Result[tuple[Order, ...], object]) -> None:
        self._many.extend(results)

    @staticmethod
    def _next[T](queue: deque[T]) -> T:
        return queue.popleft() if len(queue) > 1 else queue[0]

    @staticmethod
    def _resolve[T](scripted: T) -> T:
        if isinstance(scripted, Exception):
            raise scripted
        return scripted

    def fetch_one(self, order_id: object) -> LazyCoroResult[Order, object]:
        async def run() -> Result[Order, object]:
            self.one_calls.append(order_id)
            if self.gate is not None:
                await self.gate.wait()
            return self._resolve(self._next(self._one[order_id]))

        return LazyCoroResult(run)

    def fetch_many(self) -> LazyCoroResult[tuple[Order, ...], object]:
        async def run() -> Result[tuple[Order, ...], object]:
            self.many_calls += 1
            if self.gate is not None:
                await self.gate.wait()
            return self._resolve(self._next(self._many))

        return LazyCoroResult(run)


def build_order(order_id: int, status: OrderStatus, **overrides: object) -> Order:
    fields: dict[str, object] = {
        "id": order_id,
        "status": status,
        "created_at": datetime(2024, 5, 1, 10, 15, 30),
        "total": Decimal("1599.98"),
        "items": (
            LineItem(product_id=3, quantity=2, price=Decimal("799.99"), product_name="RTX 4080"),
        ),
        "user_id": 1,
    }
    fields.update(overrides)
    return Order(**fields)  # type: ignore[arg-type]


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def fetcher():
    return ScriptedFetcher()


@pytest.fixture
def make_order():
    return build_order


@pytest.fixture
def order_payload():
    """Factory for wire payloads in the storefront API's JSON shape."""

    def factory(order_id: int = 7, status: object = "PROCESSING", **overrides: object) -> dict:
        payload: dict[str, object] = {
            "id": order_id,
            "userId": 1,
            "total": 1299.99,
            "status": status,
            "items": [
                {
                    "id": 1,
                    "productId": 3,
                    "productName": "RTX 4090",
                    "quantity": 1,
                    "price": 1299.99,
                }
            ],
            "createdAt": "2024-05-01T10:15:30",
            "updatedAt": "2024-05-01T10:15:35",
        }
        payload.update(overrides)
        return payload

    return factory
