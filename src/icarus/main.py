"""Application bootstrap.

Wires the bus, repositories and use cases together and runs one request
through them, the same way an HTTP handler would: open a request scope,
log, call the use cases, and let the scope tear down on exit.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .application.orders import CreateOrderRequest, CreateOrderUseCase, OrderItemRequest
from .application.users import UserService
from .bus.bus import create_event_bus
from .bus.memory_bus import EventBus
from .context.request_context import current_context, request_scope
from .core.config import Settings, load_settings
from .core.events import DomainEvent, EventTypes
from .infrastructure.repositories import InMemoryOrderRepository, InMemoryUserRepository
from .observability.logger import get_logger, setup_from_settings

logger = get_logger(__name__)


@dataclass
class Container:
    """Explicitly constructed dependencies, passed to whoever needs them."""

    settings: Settings
    bus: EventBus
    users: UserService
    orders: CreateOrderUseCase


def build_container(settings: Settings) -> Container:
    bus = create_event_bus(settings)
    user_repo = InMemoryUserRepository()
    order_repo = InMemoryOrderRepository()
    users = UserService(user_repo, bus)
    orders = CreateOrderUseCase(users, order_repo, bus)
    return Container(settings=settings, bus=bus, users=users, orders=orders)


def _log_event(event: DomainEvent) -> None:
    logger.info("event.received", event_type=event.type, event_id=event.event_id)


async def handle_request(
    container: Container,
    request: dict[str, Any],
) -> dict[str, Any]:
    """Process one demo request inside its own request scope."""
    with request_scope(
        request_id=request.get("id"),
        user_id=request.get("user_id"),
    ) as ctx:
        logger.info(
            "request.received",
            method=request.get("method", "POST"),
            path=request.get("path", "/users"),
        )
        try:
            user = await container.users.create_user(request["email"], request["name"])
            ctx.set_user_id(user.id)
            order = await container.orders.execute(
                CreateOrderRequest(
                    user_id=user.id,
                    items=[
                        OrderItemRequest(
                            product_id=item["product_id"],
                            quantity=item["quantity"],
                            price=Decimal(str(item["price"])),
                        )
                        for item in request.get("items", [])
                    ],
                )
            )
            await container.bus.drain()
        except Exception:
            logger.error("request.failed", exc_info=True)
            raise

        logger.info("request.completed", order_id=order.id)
        return {
            "trace_id": current_context().get_trace_id(),
            "user": user.model_dump(),
            "order": order.model_dump(mode="json"),
        }


async def run(
    request: dict[str, Any],
    config_path: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Main entry point. Load config, set up logging, wire modules, run."""
    settings = load_settings(config_path=config_path, overrides=overrides)
    setup_from_settings(settings)

    container = build_container(settings)
    container.bus.subscribe(EventTypes.USER_CREATED, _log_event)
    container.bus.subscribe(EventTypes.ORDER_CREATED, _log_event)

    logger.info("app.started", service=settings.observability.service_name)
    return await handle_request(container, request)
