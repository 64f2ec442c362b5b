"""Canonical ID and timestamp factories.

All modules import from here instead of defining local _uuid()/_now() copies.

ID Categories
-------------
1. Correlation IDs: UUID v4 strings (trace_id, request_id)
2. Event IDs: UUID v4 strings, informational only
3. Entity IDs: prefixed UUID v4 hex (``user-…``, ``order-…``)

Timestamp Rule
--------------
All timestamps are ``datetime`` with ``tzinfo=timezone.utc``, never naive.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone


def new_id() -> str:
    """Generate a new UUID v4 string."""
    return str(uuid.uuid4())


def prefixed_id(prefix: str) -> str:
    """Generate an entity ID such as ``user-3f2a…``."""
    return f"{prefix}-{uuid.uuid4().hex}"


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)
