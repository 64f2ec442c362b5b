"""Request-scoped correlation context (trace, user and request IDs)."""

from icarus.context.request_context import (
    RequestContext,
    current_context,
    request_scope,
)

__all__ = ["RequestContext", "current_context", "request_scope"]
