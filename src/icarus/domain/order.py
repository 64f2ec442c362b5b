"""Order entity and line items."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from icarus.core.enums import OrderStatus
from icarus.core.errors import ValidationError
from icarus.core.ids import prefixed_id, utc_now


@dataclass(frozen=True)
class OrderItem:
    product_id: str
    quantity: int
    price: Decimal

    def __post_init__(self) -> None:
        if not self.product_id:
            raise ValidationError("product_id is required")
        if self.quantity <= 0:
            raise ValidationError(f"quantity must be positive, got {self.quantity}")
        if Decimal(self.price) < 0:
            raise ValidationError(f"price must not be negative, got {self.price}")

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.price) * self.quantity


def calculate_total(items: list[OrderItem]) -> Decimal:
    """Sum of ``price * quantity`` over *items*."""
    return sum((item.line_total for item in items), Decimal("0"))


@dataclass
class Order:
    id: str
    user_id: str
    items: list[OrderItem]
    total: Decimal
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def create(cls, user_id: str, items: list[OrderItem]) -> Order:
        if not items:
            raise ValidationError("Order must contain at least one item")
        return cls(
            id=prefixed_id("order"),
            user_id=user_id,
            items=list(items),
            total=calculate_total(items),
        )
