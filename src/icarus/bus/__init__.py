"""In-process event bus keyed by event type name."""

from icarus.bus.memory_bus import EventBus, EventHandler, Subscription

__all__ = ["EventBus", "EventHandler", "Subscription"]
