"""
Snapshot decoding: wire payload → Order.

Wire format (camelCase JSON, as served by the storefront API):

    {
        "id": 7,
        "userId": 1,
        "total": 1299.99,
        "status": "PROCESSING",
        "items": [
            {"id": 1, "productId": 3, "productName": "RTX 4090",
             "quantity": 1, "price": 1299.99}
        ],
        "createdAt": "2024-05-01T10:15:30",
        "updatedAt": "2024-05-01T10:15:35"
    }
"""

from __future__ import annotations

from collections.abc import Mapping

from kungfu import Result, Ok, Error
from pydantic import ValidationError

from orderwatch.order._types import DecodeError, MalformedOrder, Order, OrderStatus
from orderwatch.order._wire import OrderIn, OrderRef


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0]
    where = ".".join(str(part) for part in first["loc"])
    return f"{where}: {first['msg']}" if where else first["msg"]


# ═══════════════════════════════════════════════════════════════════════════════
# decode_order() / decode_orders()
# ═══════════════════════════════════════════════════════════════════════════════


def decode_order(payload: object) -> Result[Order, DecodeError]:
    """
    Decode one order snapshot.

    Returns Error(UnknownStatus) for a status outside the enum and
    Error(MalformedOrder) for anything else that doesn't fit the model.
    """
    if not isinstance(payload, Mapping):
        return Error(MalformedOrder("order payload must be an object"))

    try:
        ref = OrderRef.model_validate(payload)
    except ValidationError as exc:
        return Error(MalformedOrder(_describe(exc)))

    # Status first: an unknown value is its own error, never a validation failure.
    match OrderStatus.parse(payload.get("status"), ref.id):
        case Error(e):
            return Error(e)

    try:
        wire = OrderIn.model_validate(payload)
    except ValidationError as exc:
        return Error(MalformedOrder(_describe(exc), ref.id))

    return Ok(wire.to_domain())


def decode_orders(payload: object) -> Result[tuple[Order, ...], DecodeError]:
    """Decode a collection. Fails as a whole on the first bad member."""
    if not isinstance(payload, (list, tuple)):
        return Error(MalformedOrder("order collection must be a list"))

    orders: list[Order] = []
    for raw in payload:
        match decode_order(raw):
            case Ok(order):
                orders.append(order)
            case Error(e):
                return Error(e)
    return Ok(tuple(orders))


__all__ = ("decode_order", "decode_orders")
