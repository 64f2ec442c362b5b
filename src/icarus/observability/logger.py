"""Structured JSON logging with request correlation.

Uses structlog for structured logging with JSON output.
Every log entry includes the current request's trace_id, plus user_id
and request_id when they are set, and the service/environment names.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Any

import structlog

from icarus.context.request_context import current_context

_service: dict[str, str] = {"service": "icarus-platform", "environment": "development"}


def _add_request_context(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor: stamp correlation fields from the request context."""
    ctx = current_context()
    event_dict["trace_id"] = ctx.get_trace_id()
    user_id = ctx.get_user_id()
    if user_id is not None:
        event_dict.setdefault("user_id", user_id)
    request_id = ctx.get_request_id()
    if request_id is not None:
        event_dict.setdefault("request_id", request_id)
    return event_dict


def _add_service(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor: add service and environment names."""
    event_dict["service"] = _service["service"]
    event_dict["environment"] = _service["environment"]
    return event_dict


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    service: str = "icarus-platform",
    environment: str = "development",
    stream: IO[str] | None = None,
    cache_loggers: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        format: "json" for production, "console" for development.
        service: Service name stamped on every entry.
        environment: Deployment environment stamped on every entry.
        stream: Output stream (defaults to stderr).
        cache_loggers: Freeze each logger's config on first use. Tests that
            reconfigure logging repeatedly pass False.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    _service["service"] = service
    _service["environment"] = environment

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        _add_request_context,
        _add_service,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=cache_loggers,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=log_level,
        force=True,
    )


def setup_from_settings(settings: Any, stream: IO[str] | None = None) -> None:
    """Configure logging from ``Settings.observability``."""
    obs = settings.observability
    setup_logging(
        level=obs.log_level,
        format=obs.log_format,
        service=obs.service_name,
        environment=obs.environment.value,
        stream=stream,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for a module."""
    return structlog.get_logger(name)
