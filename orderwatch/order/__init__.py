"""
Order: snapshot model, status partition, wire decoding.

    from orderwatch import order as O

    match O.decode_order(payload):
        case Ok(order) if order.is_terminal:
            ...
"""

from __future__ import annotations

from orderwatch.order._types import (
    UnknownStatus,
    MalformedOrder,
    DecodeError,
    OrderStatus,
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    LineItem,
    Order,
)
from orderwatch.order._wire import OrderRef, LineItemIn, OrderIn
from orderwatch.order._decode import decode_order, decode_orders

__all__ = (
    "UnknownStatus",
    "MalformedOrder",
    "DecodeError",
    "OrderStatus",
    "ACTIVE_STATUSES",
    "TERMINAL_STATUSES",
    "LineItem",
    "Order",
    "OrderRef",
    "LineItemIn",
    "OrderIn",
    "decode_order",
    "decode_orders",
)
