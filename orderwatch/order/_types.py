"""
Order types: snapshot model and decode errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from kungfu import Result, Ok, Error

from orderwatch._types import OrderId

# ═══════════════════════════════════════════════════════════════════════════════
# Decode Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class UnknownStatus:
    """Server sent a status outside OrderStatus. Never coerced to a default."""

    value: object
    order_id: OrderId | None = None

    def __str__(self) -> str:
        where = f" for order {self.order_id}" if self.order_id is not None else ""
        return f"unknown order status {self.value!r}{where}"


@dataclass(frozen=True, slots=True)
class MalformedOrder:
    """Payload could not be decoded into an Order."""

    message: str
    order_id: OrderId | None = None

    def __str__(self) -> str:
        if self.order_id is None:
            return self.message
        return f"order {self.order_id}: {self.message}"


type DecodeError = UnknownStatus | MalformedOrder


# ═══════════════════════════════════════════════════════════════════════════════
# Order Status
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStatus(Enum):
    """
    Server-owned order status.

    Lifecycle:
        PENDING → PROCESSING → COMPLETED
                             → EXPIRED

    PENDING/PROCESSING are active (polled), COMPLETED/EXPIRED are terminal.
    """

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @classmethod
    def parse(
        cls,
        raw: object,
        order_id: OrderId | None = None,
    ) -> Result[OrderStatus, UnknownStatus]:
        """
        Parse a wire status.

        Only the exact member names are accepted.
        """
        if isinstance(raw, str):
            try:
                return Ok(cls(raw))
            except ValueError:
                pass
        return Error(UnknownStatus(raw, order_id))


ACTIVE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.PROCESSING})
TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.EXPIRED})


# ═══════════════════════════════════════════════════════════════════════════════
# Snapshot Model
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class LineItem:
    product_id: OrderId
    quantity: int
    price: Decimal  # unit price at order time
    product_name: str | None = None

    @property
    def display_name(self) -> str:
        return self.product_name or f"Product #{self.product_id}"

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True, slots=True)
class Order:
    """
    One fetched snapshot of an order.

    Replaced wholesale by the next successful fetch, never merged.
    `total` is the server's value and is not recomputed from items.
    """

    id: OrderId
    status: OrderStatus
    created_at: datetime
    total: Decimal
    items: tuple[LineItem, ...] = ()
    user_id: OrderId | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "UnknownStatus",
    "MalformedOrder",
    "DecodeError",
    "OrderStatus",
    "ACTIVE_STATUSES",
    "TERMINAL_STATUSES",
    "LineItem",
    "Order",
)
