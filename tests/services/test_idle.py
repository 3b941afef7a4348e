"""
Tests for the idle schedulers.

The asyncio scheduler is exercised on a real event loop with a real
PerformanceClock and the default idle scheduler wiring.
"""

import asyncio
import logging

import pytest

from chronos.services.context import Chronos
from chronos.services.idle import AsyncioIdleScheduler, ImmediateIdleScheduler, TimeBudgetDeadline


def test_time_budget_deadline_counts_down():
    """Test that a deadline never reports negative time."""
    deadline = TimeBudgetDeadline(budget_ms=0.0, started_at=0.0)

    assert deadline.time_remaining() == 0.0
    assert deadline.did_timeout is False


class TestImmediateIdleScheduler:
    """Synchronous idle scheduler"""

    def test_runs_callback_with_budget(self):
        scheduler = ImmediateIdleScheduler(budget_ms=50.0)
        seen = []

        scheduler.request_idle_callback(lambda d: seen.append(d.time_remaining()), timeout_ms=2000)

        assert len(seen) == 1
        assert 0.0 < seen[0] <= 50.0

    def test_nested_requests_run_after_current_slice(self):
        scheduler = ImmediateIdleScheduler()
        order = []

        def second(deadline):
            order.append("second")

        def first(deadline):
            scheduler.request_idle_callback(second, timeout_ms=2000)
            order.append("first")

        scheduler.request_idle_callback(first, timeout_ms=2000)

        assert order == ["first", "second"]

    def test_callback_errors_are_logged(self, caplog):
        scheduler = ImmediateIdleScheduler()

        def boom(deadline):
            raise RuntimeError("sink down")

        with caplog.at_level(logging.ERROR, logger="chronos"):
            scheduler.request_idle_callback(boom, timeout_ms=2000)

        assert "sink down" in caplog.text

    def test_full_drain_without_event_loop(self):
        records = []
        chronos = Chronos(sink=records.append, auto_save_on_stop=True, idle_scheduler=ImmediateIdleScheduler())

        for i in range(20):
            chronos.start(f"m{i}")
            chronos.stop(f"m{i}")

        assert [r["name"] for r in records] == [f"m{i}" for i in range(20)]
        assert chronos.flush_scheduler.is_pending is False


class TestAsyncioIdleScheduler:
    """Event-loop idle scheduler"""

    @pytest.mark.asyncio
    async def test_slice_runs_later_on_loop(self):
        scheduler = AsyncioIdleScheduler(budget_ms=20.0, delay_ms=1.0)
        seen = []

        scheduler.request_idle_callback(lambda d: seen.append(d.time_remaining()), timeout_ms=2000)

        assert seen == []
        await asyncio.sleep(0.05)
        assert len(seen) == 1
        assert scheduler.last_timeout_ms == 2000

    @pytest.mark.asyncio
    async def test_flush_is_deferred_until_idle(self):
        records = []
        chronos = Chronos(sink=records.append, auto_save_on_stop=False)

        with chronos.measure("render", {"tags": ["view:home"]}):
            await asyncio.sleep(0.01)
        chronos.save_to_store()

        assert records == []
        assert chronos.debug_snapshot().flush_pending is True

        await asyncio.sleep(0.05)

        assert len(records) == 1
        assert records[0]["name"] == "render"
        assert records[0]["duration"] >= 10.0 * 0.5
        assert records[0]["tags"] == ["view:home"]
        assert chronos.flush_scheduler.is_pending is False

    @pytest.mark.asyncio
    async def test_callback_errors_do_not_break_loop(self, caplog):
        scheduler = AsyncioIdleScheduler(delay_ms=1.0)

        def boom(deadline):
            raise RuntimeError("sink down")

        with caplog.at_level(logging.ERROR, logger="chronos"):
            scheduler.request_idle_callback(boom, timeout_ms=2000)
            await asyncio.sleep(0.05)

        assert "sink down" in caplog.text

    def test_without_running_loop_runs_immediately(self):
        scheduler = AsyncioIdleScheduler()
        seen = []

        scheduler.request_idle_callback(lambda d: seen.append(d), timeout_ms=2000)

        assert len(seen) == 1
