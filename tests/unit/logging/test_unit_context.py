# tests/unit/logging/test_unit_context.py — v2
"""Tests for logging/context.py — task-local logging context."""

from __future__ import annotations

import asyncio

import pytest

from candidaterank.logging.context import (
    clear_context,
    get_context,
    set_entry_point_context,
    set_request_context,
    signal_context,
)


class TestLogContext:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_empty_by_default(self):
        assert get_context().as_dict() == {}

    def test_request_and_entry_point(self):
        set_request_context("r1")
        set_entry_point_context("seeds")
        ctx = get_context()
        assert ctx.request_id == "r1"
        assert ctx.entry_point == "seeds"
        assert ctx.signal is None

    def test_signal_context_restores(self):
        set_entry_point_context("filter", "skills")
        with signal_context("location"):
            assert get_context().signal == "location"
        assert get_context().signal == "skills"

    @pytest.mark.asyncio
    async def test_tasks_are_isolated(self):
        async def tag(name: str) -> str | None:
            set_entry_point_context(name)
            await asyncio.sleep(0)
            return get_context().entry_point

        results = await asyncio.gather(tag("seeds"), tag("filter"))
        assert results == ["seeds", "filter"]
        assert get_context().entry_point is None
