"""Ports owned by the application layer.

Infrastructure adapters implement these; use cases depend only on them.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from icarus.domain.order import Order
from icarus.domain.user import User


@runtime_checkable
class IUserRepository(Protocol):
    async def save(self, user: User) -> None: ...

    async def find_by_id(self, user_id: str) -> User | None: ...

    async def find_by_email(self, email: str) -> User | None: ...

    async def find_all(self) -> list[User]: ...

    async def delete(self, user_id: str) -> None: ...


@runtime_checkable
class IOrderRepository(Protocol):
    async def save(self, order: Order) -> None: ...

    async def find_by_id(self, order_id: str) -> Order | None: ...

    async def find_by_user(self, user_id: str) -> list[Order]: ...


class UserDTO(BaseModel):
    """What other modules see of a user."""

    id: str
    email: str
    name: str
    status: str

    @classmethod
    def from_entity(cls, user: User) -> UserDTO:
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            status=user.status.value,
        )


@runtime_checkable
class IUserService(Protocol):
    """Port through which the order module talks to the user module."""

    async def get_user_by_id(self, user_id: str) -> UserDTO | None: ...

    async def get_user_by_email(self, email: str) -> UserDTO | None: ...

    async def create_user(self, email: str, name: str) -> UserDTO: ...
