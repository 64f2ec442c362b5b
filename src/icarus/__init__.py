"""Icarus platform core: in-process event bus and request-scoped context."""

__version__ = "0.1.0"
