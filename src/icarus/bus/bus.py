"""Event bus factory.

Builds an ``EventBus`` from settings.  There is no module-level bus
instance; the application constructs one and passes it to whatever needs
it, so tests can run with isolated buses.
"""

from __future__ import annotations

from icarus.core.config import Settings

from .memory_bus import ErrorCallback, EventBus


def create_event_bus(
    settings: Settings | None = None,
    on_handler_error: ErrorCallback | None = None,
) -> EventBus:
    """Create an event bus configured from *settings*.

    Args:
        settings: Application settings (defaults used when omitted).
        on_handler_error: Optional callback ``(event_type, handler, exc)``
            invoked when a handler raises.  Useful for external metrics.
    """
    settings = settings or Settings()
    return EventBus(
        on_handler_error=on_handler_error,
        log_errors=settings.bus.log_handler_errors,
    )
