"""In-process event bus.

Handlers are keyed by event type name and called synchronously in
registration order.  A handler may be a plain function or return an
awaitable (e.g. an ``async def``):

- ``publish()`` does not wait for awaitables when an event loop is
  running: they become background tasks and ``publish()`` returns.
  With no running loop they are driven to completion inline, so
  ``publish()`` blocks until each one finishes.
- ``publish_and_wait()`` awaits every handler registered with
  ``awaited=True`` before returning.

Handler failures are isolated per handler: caught, logged, counted and
reported to the optional ``on_handler_error`` callback.  This applies to
failures of background tasks as well.  Nothing a handler does can make
``publish()`` raise.

Counters are updated under the registry lock, so publishers on several
threads keep exact counts.
"""

from __future__ import annotations

import asyncio
import inspect
import threading
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Union

from icarus.core.events import DomainEvent
from icarus.observability.logger import get_logger

logger = get_logger(__name__)

EventHandler = Callable[[DomainEvent], Union[Awaitable[None], None]]
ErrorCallback = Callable[[str, str, BaseException], None]


@dataclass(frozen=True, eq=False)
class Subscription:
    """One registered handler for one event type."""

    handler: EventHandler
    awaited: bool = True

    @property
    def name(self) -> str:
        return _handler_name(self.handler)


def _handler_name(handler: Any) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


def _same_handler(registered: Any, handler: Any) -> bool:
    """Identity match; bound methods match on the same object and function."""
    if registered is handler:
        return True
    self_a = getattr(registered, "__self__", None)
    func_a = getattr(registered, "__func__", None)
    if self_a is None or func_a is None:
        return False
    return (
        self_a is getattr(handler, "__self__", None)
        and func_a is getattr(handler, "__func__", None)
    )


class EventBus:
    """Synchronous publish/subscribe dispatcher for ``DomainEvent``.

    Parameters
    ----------
    on_handler_error
        Optional callback ``(event_type, handler_name, exc)`` invoked when
        a handler raises.  Useful for external metrics.
    log_errors
        Emit a ``bus.handler_failed`` log line per failure (default on).
    """

    def __init__(
        self,
        on_handler_error: ErrorCallback | None = None,
        *,
        log_errors: bool = True,
    ) -> None:
        # event type → ordered subscriptions
        self._handlers: dict[str, list[Subscription]] = defaultdict(list)
        self._lock = threading.RLock()
        self._on_handler_error = on_handler_error
        self._log_errors = log_errors
        self._pending: set[asyncio.Future[Any]] = set()

        # Observability
        self._error_counts: dict[str, int] = defaultdict(int)
        self._messages_processed: int = 0

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def subscribe(
        self,
        event_type: str,
        handler: EventHandler,
        *,
        awaited: bool = True,
    ) -> None:
        """Append *handler* to the list for *event_type*.

        Subscribing the same handler twice makes it run twice per event.
        ``awaited`` only matters for ``publish_and_wait()``.
        """
        with self._lock:
            self._handlers[event_type].append(Subscription(handler, awaited))

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        """Remove the first registration of *handler* for *event_type*.

        No-op if the handler or the event type is unknown.
        """
        with self._lock:
            subs = self._handlers.get(event_type)
            if not subs:
                return
            for i, sub in enumerate(subs):
                if _same_handler(sub.handler, handler):
                    del subs[i]
                    return

    def handler_count(self, event_type: str) -> int:
        with self._lock:
            return len(self._handlers.get(event_type, ()))

    def event_types(self) -> list[str]:
        """Event types that currently have at least one handler."""
        with self._lock:
            return [t for t, subs in self._handlers.items() if subs]

    def _snapshot(self, event_type: str) -> list[Subscription]:
        with self._lock:
            return list(self._handlers.get(event_type, ()))

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def publish(self, event: DomainEvent) -> None:
        """Invoke every handler for ``event.type``, in registration order.

        Awaitables returned by handlers are not waited for when an event
        loop is running.  Without a running loop there is nowhere to
        schedule them, so each one is driven to completion inline and
        ``publish()`` blocks for its duration.
        """
        for sub in self._snapshot(event.type):
            try:
                result = sub.handler(event)
            except Exception as exc:
                self._record_failure(event, sub.name, exc)
                continue

            if inspect.isawaitable(result):
                self._fire_and_forget(event, sub.name, result)
            else:
                self._record_success()

    async def publish_and_wait(self, event: DomainEvent) -> None:
        """Like ``publish()`` but await handlers registered with ``awaited=True``.

        Handlers still run one at a time in registration order, and a
        failing handler does not stop the ones after it.
        """
        for sub in self._snapshot(event.type):
            try:
                result = sub.handler(event)
                if inspect.isawaitable(result):
                    if not sub.awaited:
                        self._fire_and_forget(event, sub.name, result)
                        continue
                    await result
                self._record_success()
            except Exception as exc:
                self._record_failure(event, sub.name, exc)

    async def drain(self) -> None:
        """Wait for every background handler task scheduled by ``publish()``."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @property
    def pending(self) -> int:
        """Number of background handler tasks still running."""
        return len(self._pending)

    def _fire_and_forget(
        self, event: DomainEvent, name: str, awaitable: Awaitable[Any]
    ) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is None:
            # No loop to hand the work to: run it here.
            try:
                asyncio.run(_as_coroutine(awaitable))
                self._record_success()
            except Exception as exc:
                self._record_failure(event, name, exc)
            return

        future = asyncio.ensure_future(awaitable)
        self._pending.add(future)

        def _done(fut: asyncio.Future[Any]) -> None:
            self._pending.discard(fut)
            if fut.cancelled():
                return
            exc = fut.exception()
            if exc is not None:
                self._record_failure(event, name, exc)
            else:
                self._record_success()

        future.add_done_callback(_done)

    def _record_success(self) -> None:
        with self._lock:
            self._messages_processed += 1

    def _record_failure(
        self, event: DomainEvent, name: str, exc: BaseException
    ) -> None:
        with self._lock:
            self._error_counts[event.type] += 1
        if self._log_errors:
            logger.error(
                "bus.handler_failed",
                event_type=event.type,
                event_id=event.event_id,
                handler=name,
                error=str(exc),
                exc_info=exc,
            )

        # Fire external error callback
        if self._on_handler_error is not None:
            try:
                self._on_handler_error(event.type, name, exc)
            except Exception:
                logger.warning("bus.error_callback_failed", exc_info=True)

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def get_error_counts(self) -> dict[str, int]:
        """Return per-event-type handler error counts."""
        with self._lock:
            return dict(self._error_counts)

    @property
    def messages_processed(self) -> int:
        """Total handler invocations that completed without error."""
        return self._messages_processed


async def _as_coroutine(awaitable: Awaitable[Any]) -> Any:
    return await awaitable
