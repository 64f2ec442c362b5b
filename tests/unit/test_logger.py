"""Test structured log stamping from the request context."""

from __future__ import annotations

import io
import json

from icarus.context.request_context import request_scope
from icarus.observability.logger import get_logger, setup_logging


def _entries(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.startswith("{")]


class TestLogStamping:
    def test_entry_carries_correlation_fields(self, log_stream):
        log = get_logger("icarus.test")

        with request_scope(trace_id="t-1", user_id="u-1", request_id="r-1"):
            log.info("request.received", path="/users")

        entry = _entries(log_stream)[-1]
        assert entry["event"] == "request.received"
        assert entry["trace_id"] == "t-1"
        assert entry["user_id"] == "u-1"
        assert entry["request_id"] == "r-1"
        assert entry["path"] == "/users"
        assert entry["service"] == "icarus-test"
        assert entry["environment"] == "test"
        assert entry["level"] == "info"
        assert entry["logger"] == "icarus.test"
        assert "timestamp" in entry

    def test_unset_fields_are_omitted(self, log_stream):
        log = get_logger("icarus.test")

        with request_scope(trace_id="t-2"):
            log.info("ping")

        entry = _entries(log_stream)[-1]
        assert entry["trace_id"] == "t-2"
        assert "user_id" not in entry
        assert "request_id" not in entry

    def test_trace_id_outside_scope_is_stable(self, log_stream):
        log = get_logger("icarus.test")
        log.info("first")
        log.info("second")

        first, second = _entries(log_stream)[-2:]
        assert first["trace_id"]
        assert first["trace_id"] == second["trace_id"]

    def test_explicit_user_id_is_not_overwritten(self, log_stream):
        log = get_logger("icarus.test")

        with request_scope(user_id="ctx-user"):
            log.info("user.created", user_id="explicit")

        assert _entries(log_stream)[-1]["user_id"] == "explicit"

    def test_error_includes_exception(self, log_stream):
        log = get_logger("icarus.test")

        try:
            raise ValueError("Email and name are required")
        except ValueError:
            log.error("user.create_failed", exc_info=True)

        entry = _entries(log_stream)[-1]
        assert entry["level"] == "error"
        assert "ValueError: Email and name are required" in entry["exception"]

    def test_level_filtering(self):
        stream = io.StringIO()
        setup_logging(level="WARNING", stream=stream, cache_loggers=False)
        log = get_logger("icarus.test")

        log.info("hidden")
        log.warning("shown")

        events = [e["event"] for e in _entries(stream)]
        assert events == ["shown"]

    def test_console_format(self):
        stream = io.StringIO()
        setup_logging(format="console", stream=stream, cache_loggers=False)

        with request_scope(trace_id="t-console"):
            get_logger("icarus.test").info("hello")

        out = stream.getvalue()
        assert "hello" in out
        assert "t-console" in out
