"""
Fetch types: the I/O edge the pollers read through.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Protocol

from combinators import lift as L
from kungfu import LazyCoroResult, Result

from orderwatch._types import OrderId
from orderwatch.order import Order, UnknownStatus, MalformedOrder

# ═══════════════════════════════════════════════════════════════════════════════
# Fetch Failure
# ═══════════════════════════════════════════════════════════════════════════════


class FetchFailureKind(Enum):
    """Fetch failure kinds."""

    TRANSPORT = auto()  # Connection refused, DNS, reset...
    HTTP = auto()  # Server answered with an error status
    TIMEOUT = auto()  # No answer within the request deadline


@dataclass(frozen=True, slots=True)
class FetchFailure:
    """Transport/server error, surfaced verbatim to the caller."""

    kind: FetchFailureKind
    message: str
    status_code: int | None = None

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.status_code}: {self.message}"


type FetchError = FetchFailure | UnknownStatus | MalformedOrder


# ═══════════════════════════════════════════════════════════════════════════════
# Fetcher Protocol: Users Implement This
# ═══════════════════════════════════════════════════════════════════════════════


class OrderFetcher(Protocol):
    """
    Order fetcher protocol.

    Both calls are idempotent reads and fail fast: no retry inside,
    the pollers own the failure policy. Implementations hold no
    per-poller state and may be shared freely.

    Example:
        class GrpcFetcher:
            def __init__(self, stub: OrdersStub) -> None:
                self.stub = stub

            def fetch_one(self, order_id: OrderId) -> LazyCoroResult[Order, FetchError]:
                return L.catching_async(
                    lambda: self.stub.get(order_id),
                    on_error=lambda e: FetchFailure(FetchFailureKind.TRANSPORT, str(e)),
                ).then(decode)

            def fetch_many(self) -> LazyCoroResult[tuple[Order, ...], FetchError]:
                ...
    """

    def fetch_one(self, order_id: OrderId) -> LazyCoroResult[Order, FetchError]:
        """Current snapshot of one order."""
        ...

    def fetch_many(self) -> LazyCoroResult[tuple[Order, ...], FetchError]:
        """Current snapshot of the caller's whole order collection."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# guarded(): Fetcher Calls That Raise
# ═══════════════════════════════════════════════════════════════════════════════


def raised_failure(exc: Exception) -> FetchFailure:
    return FetchFailure(FetchFailureKind.TRANSPORT, str(exc) or type(exc).__name__)


def guarded[T](
    call: Callable[[], Awaitable[Result[T, FetchError]]],
) -> LazyCoroResult[T, FetchError]:
    """
    Run a fetcher call so that a raised exception comes back as
    Error(FetchFailure(TRANSPORT)) instead of escaping.

    Example:
        result = await guarded(lambda: fetcher.fetch_one(order_id))
    """
    return L.catching_async(call, on_error=raised_failure).then(L.from_result)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "FetchFailureKind",
    "FetchFailure",
    "FetchError",
    "OrderFetcher",
    "raised_failure",
    "guarded",
)
