"""Shared fixtures for the icarus test suite."""

from __future__ import annotations

import io

import pytest

from icarus.application.users import UserService
from icarus.bus.memory_bus import EventBus
from icarus.context import request_context
from icarus.core.config import Settings
from icarus.core.events import DomainEvent
from icarus.infrastructure.repositories import (
    InMemoryOrderRepository,
    InMemoryUserRepository,
)
from icarus.observability.logger import setup_logging


# ---------------------------------------------------------------------------
# Bus
# ---------------------------------------------------------------------------

@pytest.fixture
def bus() -> EventBus:
    """Return a fresh EventBus instance."""
    return EventBus()


@pytest.fixture
def make_event():
    def _make(event_type: str = "user.created", **payload) -> DomainEvent:
        return DomainEvent(type=event_type, payload=payload or {"id": "u1"})

    return _make


# ---------------------------------------------------------------------------
# Request context
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolated_request_context():
    """Unbind any request context left behind by a previous test."""
    token = request_context._current.set(None)
    yield
    request_context._current.reset(token)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

@pytest.fixture
def log_stream() -> io.StringIO:
    """JSON logging to an in-memory stream."""
    stream = io.StringIO()
    setup_logging(
        level="INFO",
        format="json",
        service="icarus-test",
        environment="test",
        stream=stream,
        cache_loggers=False,
    )
    return stream


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def order_repo() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def user_service(user_repo, bus) -> UserService:
    return UserService(user_repo, bus)
