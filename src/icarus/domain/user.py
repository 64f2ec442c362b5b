"""User entity.

Business rules are enforced here and nowhere else:

- email must look like ``local@domain.tld`` and is stored lower-cased;
- name must not be blank and is stored trimmed;
- new users start ``ACTIVE``;
- ``activate()`` / ``deactivate()`` refuse no-op transitions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime

from icarus.core.enums import UserStatus
from icarus.core.errors import InvalidStateError, ValidationError
from icarus.core.ids import prefixed_id, utc_now

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str) -> bool:
    return bool(email) and _EMAIL_RE.match(email) is not None


@dataclass
class User:
    id: str
    email: str
    name: str
    status: UserStatus = UserStatus.ACTIVE
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @classmethod
    def create(cls, email: str, name: str) -> User:
        """Build a new active user, validating *email* and *name*."""
        email = (email or "").strip()
        if not is_valid_email(email):
            raise ValidationError("Invalid email address")
        if not name or not name.strip():
            raise ValidationError("Name is required")

        now = utc_now()
        return cls(
            id=prefixed_id("user"),
            email=email.lower(),
            name=name.strip(),
            status=UserStatus.ACTIVE,
            created_at=now,
            updated_at=now,
        )

    def activate(self) -> None:
        if self.status == UserStatus.ACTIVE:
            raise InvalidStateError("User is already active")
        self.status = UserStatus.ACTIVE
        self.updated_at = utc_now()

    def deactivate(self) -> None:
        if self.status == UserStatus.INACTIVE:
            raise InvalidStateError("User is already inactive")
        self.status = UserStatus.INACTIVE
        self.updated_at = utc_now()

    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE
