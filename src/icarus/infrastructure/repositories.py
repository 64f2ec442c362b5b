"""In-memory repository adapters.

Dict-backed implementations of ``IUserRepository`` and
``IOrderRepository`` for tests and local development.
"""

from __future__ import annotations

from icarus.domain.order import Order
from icarus.domain.user import User


class InMemoryUserRepository:
    def __init__(self) -> None:
        self._users: dict[str, User] = {}

    async def save(self, user: User) -> None:
        self._users[user.id] = user

    async def find_by_id(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    async def find_by_email(self, email: str) -> User | None:
        for user in self._users.values():
            if user.email == email:
                return user
        return None

    async def find_all(self) -> list[User]:
        return list(self._users.values())

    async def delete(self, user_id: str) -> None:
        self._users.pop(user_id, None)


class InMemoryOrderRepository:
    def __init__(self) -> None:
        self._orders: dict[str, Order] = {}

    async def save(self, order: Order) -> None:
        self._orders[order.id] = order

    async def find_by_id(self, order_id: str) -> Order | None:
        return self._orders.get(order_id)

    async def find_by_user(self, user_id: str) -> list[Order]:
        return [o for o in self._orders.values() if o.user_id == user_id]
