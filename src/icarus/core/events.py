"""Domain event envelope for the in-process event bus.

Design invariants
-----------------
1.  Every event is **immutable** (``frozen=True``).
2.  ``type`` is the dispatch key and must be a non-empty string.
3.  ``payload`` is opaque to the bus; no schema is imposed.
4.  ``event_id`` is informational.  Two events with the same ``type``
    and ``payload`` are independent values.

Event type names used by the bundled modules live in ``EventTypes``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .errors import InvalidEventError
from .ids import new_id as _uuid
from .ids import utc_now as _now


@dataclass(frozen=True)
class DomainEvent:
    """A named fact published for interested consumers in the same process.

    Fields
    ~~~~~~
    type        Dispatch key, chosen by the publisher (``"user.created"``).
    payload     Arbitrary structured data.
    timestamp   UTC creation time.
    event_id    UUID4, useful for log correlation only.
    """

    type: str
    payload: Any = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_now)
    event_id: str = field(default_factory=_uuid)

    def __post_init__(self) -> None:
        if not isinstance(self.type, str) or not self.type.strip():
            raise InvalidEventError("DomainEvent.type must be a non-empty string")


class EventTypes:
    """Event type names published by the bundled user and order modules."""

    USER_CREATED = "user.created"
    USER_ACTIVATED = "user.activated"
    USER_DEACTIVATED = "user.deactivated"
    ORDER_CREATED = "order.created"
