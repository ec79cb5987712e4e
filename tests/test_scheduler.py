"""Tests for the debouncer and the periodic rollover watcher."""

from __future__ import annotations

import asyncio

import pytest

from dailytask.core.services import Debouncer, RolloverWatcher


class TestDebouncer:
    @pytest.mark.asyncio
    async def test_burst_runs_once_with_last_arguments(self):
        calls: list[str] = []

        async def record(value: str) -> None:
            calls.append(value)

        debouncer = Debouncer(0.02)
        for value in ("a", "b", "c"):
            debouncer.schedule(record, value)
        await debouncer.flush()

        assert calls == ["c"]
        assert not debouncer.pending

    @pytest.mark.asyncio
    async def test_cancel_drops_the_pending_run(self):
        calls: list[int] = []

        async def record() -> None:
            calls.append(1)

        debouncer = Debouncer(0.02)
        debouncer.schedule(record)
        assert debouncer.pending

        assert debouncer.cancel() is True
        await asyncio.sleep(0.05)

        assert calls == []
        assert debouncer.cancel() is False

    @pytest.mark.asyncio
    async def test_failure_does_not_escape_flush(self):
        async def explode() -> None:
            msg = "boom"
            raise RuntimeError(msg)

        debouncer = Debouncer(0)
        task = debouncer.schedule(explode)
        await debouncer.flush()

        assert isinstance(task.exception(), RuntimeError)

    @pytest.mark.asyncio
    async def test_flush_without_pending_run(self):
        await Debouncer(0.01).flush()


class TestRolloverWatcher:
    @pytest.mark.asyncio
    async def test_ticks_until_stopped(self):
        ticks: list[int] = []

        async def check() -> None:
            ticks.append(1)

        watcher = RolloverWatcher(check, 0.01)
        watcher.start()
        watcher.start()
        await asyncio.sleep(0.06)
        await watcher.stop()
        count = len(ticks)
        await asyncio.sleep(0.03)

        assert count >= 2
        assert len(ticks) == count
        assert not watcher.running

    @pytest.mark.asyncio
    async def test_failing_check_keeps_ticking(self):
        ticks: list[int] = []

        async def check() -> None:
            ticks.append(1)
            msg = "clock unavailable"
            raise RuntimeError(msg)

        watcher = RolloverWatcher(check, 0.01)
        watcher.start()
        await asyncio.sleep(0.06)
        await watcher.stop()

        assert len(ticks) >= 2

    @pytest.mark.asyncio
    async def test_stop_before_start(self):
        await RolloverWatcher(asyncio.sleep, 1).stop()
