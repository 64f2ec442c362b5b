"""User use cases and the ``IUserService`` facade."""

from __future__ import annotations

from pydantic import BaseModel

from icarus.bus.memory_bus import EventBus
from icarus.core.errors import UserAlreadyExistsError, UserNotFoundError
from icarus.core.events import DomainEvent, EventTypes
from icarus.domain.user import User
from icarus.observability.logger import get_logger

from .interfaces import IUserRepository, UserDTO

logger = get_logger(__name__)


class CreateUserRequest(BaseModel):
    email: str
    name: str


class CreateUserResponse(BaseModel):
    user: UserDTO


class CreateUserUseCase:
    """Register a new user and announce it on the bus.

    1. Reject duplicate emails.
    2. Build the entity (validation lives in ``User.create``).
    3. Save through the repository port.
    4. Publish ``user.created``.
    """

    def __init__(self, repository: IUserRepository, bus: EventBus | None = None) -> None:
        self._repository = repository
        self._bus = bus

    async def execute(self, request: CreateUserRequest) -> CreateUserResponse:
        logger.info("user.create_requested", email_present=bool(request.email))

        existing = await self._repository.find_by_email(request.email.strip().lower())
        if existing is not None:
            logger.warning("user.create_rejected", reason="duplicate_email")
            raise UserAlreadyExistsError(request.email)

        user = User.create(request.email, request.name)
        await self._repository.save(user)
        logger.info("user.created", new_user_id=user.id)

        dto = UserDTO.from_entity(user)
        if self._bus is not None:
            self._bus.publish(
                DomainEvent(type=EventTypes.USER_CREATED, payload=dto.model_dump())
            )
        return CreateUserResponse(user=dto)


class UserService:
    """In-process implementation of ``IUserService``."""

    def __init__(self, repository: IUserRepository, bus: EventBus | None = None) -> None:
        self._repository = repository
        self._bus = bus
        self._create = CreateUserUseCase(repository, bus)

    async def get_user_by_id(self, user_id: str) -> UserDTO | None:
        user = await self._repository.find_by_id(user_id)
        return UserDTO.from_entity(user) if user else None

    async def get_user_by_email(self, email: str) -> UserDTO | None:
        user = await self._repository.find_by_email(email.strip().lower())
        return UserDTO.from_entity(user) if user else None

    async def create_user(self, email: str, name: str) -> UserDTO:
        response = await self._create.execute(CreateUserRequest(email=email, name=name))
        return response.user

    async def activate_user(self, user_id: str) -> UserDTO:
        return await self._transition(user_id, activate=True)

    async def deactivate_user(self, user_id: str) -> UserDTO:
        return await self._transition(user_id, activate=False)

    async def _transition(self, user_id: str, *, activate: bool) -> UserDTO:
        user = await self._repository.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        if activate:
            user.activate()
            event_type = EventTypes.USER_ACTIVATED
        else:
            user.deactivate()
            event_type = EventTypes.USER_DEACTIVATED
        await self._repository.save(user)
        logger.info("user.status_changed", target_user_id=user.id, status=user.status.value)

        dto = UserDTO.from_entity(user)
        if self._bus is not None:
            self._bus.publish(DomainEvent(type=event_type, payload=dto.model_dump()))
        return dto
