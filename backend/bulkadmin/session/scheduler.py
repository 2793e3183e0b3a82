"""Timer primitives owned by the session manager."""

import asyncio
import time
from collections.abc import Callable, Coroutine
from typing import Any, Protocol

from ..logging import get_logger

logger = get_logger("session")


class Cancellable(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    """Clock plus one-shot timers, repeating intervals and background tasks."""

    def now(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...

    def call_every(self, interval: float, callback: Callable[[], None]) -> Cancellable: ...

    def spawn(self, coro: Coroutine[Any, Any, None], name: str) -> Cancellable: ...

    async def aclose(self) -> None: ...


class AsyncioScheduler:
    """Scheduler running on the current asyncio event loop, wall-clock time.

    Interval loops and spawned coroutines are kept in a task table until
    they finish, so aclose() can cancel and wait for them.
    """

    def __init__(self):
        self._tasks: set[asyncio.Task] = set()

    def now(self) -> float:
        return time.time()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)

    def call_every(self, interval: float, callback: Callable[[], None]) -> asyncio.Task:
        return self._track(asyncio.create_task(self._repeat(interval, callback), name="session-interval"))

    async def _repeat(self, interval: float, callback: Callable[[], None]) -> None:
        while True:
            await asyncio.sleep(interval)
            callback()

    def spawn(self, coro: Coroutine[Any, Any, None], name: str) -> asyncio.Task:
        task = self._track(asyncio.create_task(coro, name=name))

        def _on_done(t: asyncio.Task):
            if t.cancelled():
                return
            exc = t.exception()
            if exc:
                logger.error(f"Task {name} crashed: {type(exc).__name__}: {exc}")

        task.add_done_callback(_on_done)
        return task

    def _track(self, task: asyncio.Task) -> asyncio.Task:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending(self) -> list[asyncio.Task]:
        return [t for t in self._tasks if not t.done()]

    async def aclose(self) -> None:
        """Cancel every interval and spawned task, then wait for them to unwind."""
        tasks = self.pending
        for task in tasks:
            task.cancel()
        if tasks:
            logger.debug(f"Waiting for {len(tasks)} session task(s) to stop")
            await asyncio.gather(*tasks, return_exceptions=True)
