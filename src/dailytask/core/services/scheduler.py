# ♥♥─── Scheduling Helpers ───────────────────────────────────────────────────────
"""Cancellable delayed and periodic tasks on the running event loop."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
import asyncio

from dailytask.custom_logger import log


if TYPE_CHECKING:
    from collections.abc import Callable, Awaitable


def _log_task_failure(task: asyncio.Task[Any]) -> None:
    """Done-callback reporting exceptions of fire-and-forget tasks."""
    if task.cancelled():
        return
    if (error := task.exception()) is not None:
        log.opt(exception=error).error("Background task {} failed: {}", task.get_name(), error)


# ─── Debouncer ─────────────────────────────────────────────────────────────────
class Debouncer:
    """Run a coroutine once the calls to :meth:`schedule` settle for ``delay`` seconds.

    Every call replaces the pending one, so a burst of calls collapses into a
    single run with the arguments of the last call.
    """

    def __init__(self, delay: float, name: str = "debounce") -> None:
        """Initialize the debouncer.

        :param delay: Quiet period in seconds.
        :param name: Prefix for the asyncio task names.
        """
        self.delay = delay
        self.name = name
        self._pending_task: asyncio.Task[Any] | None = None

    @property
    def pending(self) -> bool:
        """True while a scheduled run has not finished."""
        return self._pending_task is not None and not self._pending_task.done()

    def schedule(self, func: Callable[..., Awaitable[Any]], *args: Any) -> asyncio.Task[Any]:
        """Cancel any pending run and schedule ``func(*args)`` after the delay."""
        self.cancel()
        self._pending_task = asyncio.create_task(self._run_later(func, *args), name=f"{self.name}:{args}")
        self._pending_task.add_done_callback(_log_task_failure)
        return self._pending_task

    async def _run_later(self, func: Callable[..., Awaitable[Any]], *args: Any) -> Any:
        await asyncio.sleep(self.delay)
        return await func(*args)

    def cancel(self) -> bool:
        """Cancel the pending run, if any.

        :returns: True if something was cancelled.
        """
        if self.pending:
            assert self._pending_task is not None
            self._pending_task.cancel()
            self._pending_task = None
            return True
        self._pending_task = None
        return False

    async def flush(self) -> None:
        """Wait for the pending run, if any, to finish."""
        task = self._pending_task
        if task is not None and not task.done():
            await asyncio.gather(task, return_exceptions=True)


# ─── Periodic Task ─────────────────────────────────────────────────────────────
class RolloverWatcher:
    """Call an async check every ``interval`` seconds until stopped.

    Failures of a single check are logged and the loop keeps going.
    """

    def __init__(self, check: Callable[[], Awaitable[Any]], interval: float) -> None:
        """Initialize the watcher.

        :param check: Coroutine function run on every tick.
        :param interval: Seconds between ticks.
        """
        self.check = check
        self.interval = interval
        self._loop_task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        """True while the periodic loop is active."""
        return self._loop_task is not None and not self._loop_task.done()

    def start(self) -> None:
        """Start ticking; a second call is a no-op."""
        if self.running:
            return
        self._loop_task = asyncio.create_task(self._tick_forever(), name="rollover-watcher")
        log.debug("Rollover watcher started, checking every {}s.", self.interval)

    async def _tick_forever(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.check()
            except Exception as e:  # noqa: BLE001
                log.opt(exception=e).error("Rollover check failed: {}", e)

    async def stop(self) -> None:
        """Stop ticking and wait for the loop to unwind."""
        task = self._loop_task
        self._loop_task = None
        if task is None or task.done():
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        log.debug("Rollover watcher stopped.")
