"""Order use cases.

The order module reaches the user module only through ``IUserService``.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from icarus.bus.memory_bus import EventBus
from icarus.core.enums import UserStatus
from icarus.core.errors import UserInactiveError, UserNotFoundError
from icarus.core.events import DomainEvent, EventTypes
from icarus.domain.order import Order, OrderItem
from icarus.observability.logger import get_logger

from .interfaces import IOrderRepository, IUserService

logger = get_logger(__name__)


class OrderItemRequest(BaseModel):
    product_id: str
    quantity: int
    price: Decimal


class CreateOrderRequest(BaseModel):
    user_id: str
    items: list[OrderItemRequest] = Field(default_factory=list)


class OrderDTO(BaseModel):
    id: str
    user_id: str
    items: list[OrderItemRequest]
    total: Decimal
    status: str

    @classmethod
    def from_entity(cls, order: Order) -> OrderDTO:
        return cls(
            id=order.id,
            user_id=order.user_id,
            items=[
                OrderItemRequest(
                    product_id=i.product_id, quantity=i.quantity, price=i.price
                )
                for i in order.items
            ],
            total=order.total,
            status=order.status.value,
        )


class CreateOrderUseCase:
    def __init__(
        self,
        user_service: IUserService,
        repository: IOrderRepository,
        bus: EventBus | None = None,
    ) -> None:
        self._users = user_service
        self._repository = repository
        self._bus = bus

    async def execute(self, request: CreateOrderRequest) -> OrderDTO:
        user = await self._users.get_user_by_id(request.user_id)
        if user is None:
            raise UserNotFoundError(request.user_id)
        if user.status != UserStatus.ACTIVE.value:
            raise UserInactiveError(user.id, user.status)

        order = Order.create(
            request.user_id,
            [
                OrderItem(product_id=i.product_id, quantity=i.quantity, price=i.price)
                for i in request.items
            ],
        )
        await self._repository.save(order)
        logger.info("order.created", order_id=order.id, total=str(order.total))

        dto = OrderDTO.from_entity(order)
        if self._bus is not None:
            self._bus.publish(
                DomainEvent(
                    type=EventTypes.ORDER_CREATED,
                    payload=dto.model_dump(mode="json"),
                )
            )
        return dto
