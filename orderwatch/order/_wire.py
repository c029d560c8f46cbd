"""
Wire models: the storefront API's camelCase JSON, validated by pydantic.

    OrderIn.model_validate(payload).to_domain() -> Order
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

from orderwatch.order._types import LineItem, Order, OrderStatus

WireId = StrictInt | StrictStr
Money = Annotated[Decimal, Field(ge=0, allow_inf_nan=False)]


class _Wire(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, frozen=True)


class OrderRef(_Wire):
    """Just the identity, read first so later errors can name the order."""

    id: WireId


class LineItemIn(_Wire):
    product_id: WireId
    quantity: PositiveInt
    price: Money
    product_name: str | None = None

    def to_domain(self) -> LineItem:
        return LineItem(
            product_id=self.product_id,
            quantity=self.quantity,
            price=self.price,
            product_name=self.product_name or None,
        )


class OrderIn(OrderRef):
    status: OrderStatus
    created_at: datetime
    total: Money
    items: list[LineItemIn] | None = None
    user_id: WireId | None = None
    updated_at: datetime | None = None

    def to_domain(self) -> Order:
        return Order(
            id=self.id,
            status=self.status,
            created_at=self.created_at,
            total=self.total,
            items=tuple(item.to_domain() for item in self.items or ()),
            user_id=self.user_id,
            updated_at=self.updated_at,
        )


__all__ = ("OrderRef", "LineItemIn", "OrderIn")
