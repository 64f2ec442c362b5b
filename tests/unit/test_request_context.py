"""Test RequestContext accessors, scoping and isolation."""

from __future__ import annotations

import asyncio
import threading
import uuid
from contextvars import copy_context

import pytest

from icarus.context import request_context as rc
from icarus.context.request_context import (
    RequestContext,
    current_context,
    peek_context,
    request_scope,
)


class TestRequestContextInstance:
    def test_get_missing_key_returns_none(self):
        ctx = RequestContext()
        assert ctx.get("nope") is None
        assert ctx.get("nope", "fallback") == "fallback"

    def test_latest_set_wins(self):
        ctx = RequestContext()
        ctx.set("tenant", "a")
        ctx.set("tenant", "b")
        assert ctx.get("tenant") == "b"
        assert len(ctx) == 1

    def test_trace_id_auto_generated_once(self):
        ctx = RequestContext()
        first = ctx.get_trace_id()
        second = ctx.get_trace_id()

        assert first
        assert first == second
        assert ctx.get_all() == {"trace_id": first}

    def test_set_trace_id_overrides(self):
        ctx = RequestContext()
        ctx.set_trace_id("trace-1")
        assert ctx.get_trace_id() == "trace-1"

    def test_generate_trace_id_is_uuid_text(self):
        tid = RequestContext.generate_trace_id()
        assert str(uuid.UUID(tid)) == tid
        assert tid != RequestContext.generate_trace_id()

    def test_user_and_request_id_accessors(self):
        ctx = RequestContext()
        assert ctx.get_user_id() is None
        assert ctx.get_request_id() is None

        ctx.set_user_id("u-42")
        ctx.set_request_id("req-1")

        assert ctx.get_user_id() == "u-42"
        assert ctx.get_request_id() == "req-1"

    def test_get_all_is_a_snapshot(self):
        ctx = RequestContext(tenant="acme")
        snapshot = ctx.get_all()
        snapshot["tenant"] = "changed"
        snapshot["extra"] = 1

        assert ctx.get_all() == {"tenant": "acme"}

    def test_clear_empties_store(self):
        ctx = RequestContext()
        ctx.set_user_id("u-42")
        ctx.get_trace_id()

        ctx.clear()

        assert ctx.get_all() == {}


class TestModuleHelpers:
    def test_user_id_scenario(self):
        rc.set_user_id("u-42")
        assert rc.get_user_id() == "u-42"

        rc.clear()

        assert rc.get_user_id() is None

    def test_trace_id_without_prior_set(self):
        tid = rc.get_trace_id()
        assert isinstance(tid, str) and tid
        assert rc.get_trace_id() == tid

    def test_clear_then_get_all_is_empty(self):
        rc.set_value("k", "v")
        rc.set_request_id("req-9")
        rc.clear()
        assert rc.get_all() == {}

    def test_generic_set_get(self):
        rc.set_value("tenant", "acme")
        assert rc.get_value("tenant") == "acme"
        assert rc.get_value("missing") is None

    def test_current_context_created_lazily(self):
        assert peek_context() is None
        ctx = current_context()
        assert peek_context() is ctx
        assert current_context() is ctx


class TestRequestScope:
    def test_scope_seeds_fields(self):
        with request_scope(trace_id="t-1", user_id="u-1", request_id="r-1", tenant="acme") as ctx:
            assert current_context() is ctx
            assert rc.get_trace_id() == "t-1"
            assert rc.get_user_id() == "u-1"
            assert rc.get_request_id() == "r-1"
            assert rc.get_value("tenant") == "acme"

    def test_scope_generates_trace_id(self):
        with request_scope() as ctx:
            assert ctx.get("trace_id")
            assert ctx.get_user_id() is None

    def test_scope_unbinds_on_exit_and_keeps_fields(self):
        with request_scope(trace_id="t-1", user_id="u-1") as ctx:
            pass

        assert peek_context() is None
        assert ctx.get_trace_id() == "t-1"
        assert ctx.get_user_id() == "u-1"

    def test_next_scope_starts_empty(self):
        with request_scope(user_id="u-1"):
            pass

        with request_scope() as second:
            assert second.get_user_id() is None

    def test_scope_unbinds_on_exception(self):
        with pytest.raises(RuntimeError):
            with request_scope(user_id="u-1"):
                raise RuntimeError("handler failed")

        assert peek_context() is None

    def test_nested_scope_restores_outer(self):
        with request_scope(trace_id="outer") as outer:
            with request_scope(trace_id="inner"):
                assert rc.get_trace_id() == "inner"
            assert current_context() is outer
            assert rc.get_trace_id() == "outer"


class TestIsolation:
    async def test_concurrent_tasks_see_their_own_context(self):
        seen: dict[str, tuple[str | None, str]] = {}

        async def handle(user_id: str) -> None:
            with request_scope(user_id=user_id, trace_id=f"trace-{user_id}"):
                await asyncio.sleep(0)
                seen[user_id] = (rc.get_user_id(), rc.get_trace_id())

        await asyncio.gather(*(handle(f"u{i}") for i in range(5)))

        for i in range(5):
            assert seen[f"u{i}"] == (f"u{i}", f"trace-u{i}")

    async def test_task_outliving_scope_keeps_its_fields(self):
        release = asyncio.Event()

        async def late_reader() -> tuple[str, str | None]:
            await release.wait()
            return rc.get_trace_id(), rc.get_request_id()

        with request_scope(trace_id="trace-req", request_id="req-1"):
            task = asyncio.create_task(late_reader())

        assert peek_context() is None
        release.set()
        assert await task == ("trace-req", "req-1")

    async def test_child_task_inherits_scope(self):
        with request_scope(request_id="req-parent"):
            child = asyncio.create_task(_read_request_id())
            assert await child == "req-parent"

    def test_threads_are_isolated(self):
        results: dict[str, str | None] = {}
        barrier = threading.Barrier(2)

        def worker(name: str) -> None:
            with request_scope(user_id=name):
                barrier.wait()
                results[name] = rc.get_user_id()

        threads = [threading.Thread(target=worker, args=(n,)) for n in ("a", "b")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results == {"a": "a", "b": "b"}

    def test_copied_context_shares_bound_context(self):
        rc.set_user_id("outer")
        assert copy_context().run(rc.get_user_id) == "outer"


async def _read_request_id() -> str | None:
    return rc.get_request_id()
