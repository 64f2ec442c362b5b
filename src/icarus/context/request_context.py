"""Request-scoped correlation context.

A ``RequestContext`` carries per-request metadata (trace ID, user ID,
request ID, arbitrary keys) to any code running inside that request
without explicit parameter threading.

Each request gets its own instance, bound to a ``ContextVar`` for the
duration of a ``request_scope()`` block.  asyncio tasks and threads
started with a copied context see the context that was current when they
were created, so concurrent requests never observe each other's fields.

Usage::

    with request_scope(user_id="u-42", request_id=req.id) as ctx:
        log.info("request.received", path=req.path)
        ...  # unbound on exit, even on error
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

TRACE_ID = "trace_id"
USER_ID = "user_id"
REQUEST_ID = "request_id"

_current: ContextVar[RequestContext | None] = ContextVar(
    "icarus_request_context", default=None
)


class RequestContext:
    """Key/value store for one request's correlation metadata.

    At most one value per key; the latest ``set`` wins.  ``get`` on a
    missing key returns ``None`` (or the given default), never raises.
    """

    def __init__(self, **initial: Any) -> None:
        self._data: dict[str, Any] = dict(initial)

    @staticmethod
    def generate_trace_id() -> str:
        """Return a new 128-bit random trace ID rendered as UUID text."""
        return str(uuid.uuid4())

    # -- Generic access ----------------------------------------------------

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def get_all(self) -> dict[str, Any]:
        """Snapshot of every key/value pair."""
        return dict(self._data)

    def clear(self) -> None:
        self._data.clear()

    # -- Typed accessors ---------------------------------------------------

    def get_trace_id(self) -> str:
        """Return the trace ID, generating and storing one if unset.

        This read has a side effect on purpose: the first code that asks
        for a trace ID establishes it for the remainder of the request.
        """
        trace_id = self._data.get(TRACE_ID)
        if not trace_id:
            trace_id = self.generate_trace_id()
            self._data[TRACE_ID] = trace_id
        return trace_id

    def set_trace_id(self, trace_id: str) -> None:
        self._data[TRACE_ID] = trace_id

    def get_user_id(self) -> str | None:
        return self._data.get(USER_ID)

    def set_user_id(self, user_id: str) -> None:
        self._data[USER_ID] = user_id

    def get_request_id(self) -> str | None:
        return self._data.get(REQUEST_ID)

    def set_request_id(self, request_id: str) -> None:
        self._data[REQUEST_ID] = request_id

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"RequestContext({self._data!r})"


# ---------------------------------------------------------------------------
# Scoping
# ---------------------------------------------------------------------------

def current_context() -> RequestContext:
    """Return the context bound to the caller.

    Outside any ``request_scope()`` a context is created lazily and bound
    in the current ``contextvars`` context.
    """
    ctx = _current.get()
    if ctx is None:
        ctx = RequestContext()
        _current.set(ctx)
    return ctx


def peek_context() -> RequestContext | None:
    """Return the bound context without creating one."""
    return _current.get()


@contextmanager
def request_scope(
    trace_id: str | None = None,
    user_id: str | None = None,
    request_id: str | None = None,
    **extra: Any,
) -> Iterator[RequestContext]:
    """Bind a fresh ``RequestContext`` for the duration of the block.

    ``trace_id`` defaults to a newly generated ID.  ``user_id`` and
    ``request_id`` are only stored when given.  On exit the previous
    binding (if any) is restored.  The context itself keeps its fields, so
    background handler tasks that copied it still log under the
    request's trace ID after the scope has ended.
    """
    ctx = RequestContext(**extra)
    ctx.set_trace_id(trace_id or RequestContext.generate_trace_id())
    if user_id is not None:
        ctx.set_user_id(user_id)
    if request_id is not None:
        ctx.set_request_id(request_id)

    token = _current.set(ctx)
    try:
        yield ctx
    finally:
        _current.reset(token)


# ---------------------------------------------------------------------------
# Module-level helpers operating on the current context
# ---------------------------------------------------------------------------

def generate_trace_id() -> str:
    return RequestContext.generate_trace_id()


def set_value(key: str, value: Any) -> None:
    current_context().set(key, value)


def get_value(key: str, default: Any = None) -> Any:
    return current_context().get(key, default)


def get_trace_id() -> str:
    """Current trace ID; generated and stored on first read."""
    return current_context().get_trace_id()


def set_trace_id(trace_id: str) -> None:
    current_context().set_trace_id(trace_id)


def get_user_id() -> str | None:
    return current_context().get_user_id()


def set_user_id(user_id: str) -> None:
    current_context().set_user_id(user_id)


def get_request_id() -> str | None:
    return current_context().get_request_id()


def set_request_id(request_id: str) -> None:
    current_context().set_request_id(request_id)


def get_all() -> dict[str, Any]:
    return current_context().get_all()


def clear() -> None:
    current_context().clear()
