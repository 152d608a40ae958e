"""Async helpers.

Dispatchers are plain coroutines. `TaskTracker` runs them as tasks on the
current loop so in-flight work can be awaited or cancelled when the view
that started it goes away.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, Set

from gui.utils.logging import logger


class TaskTracker:
    def __init__(self) -> None:
        self._tasks: Set["asyncio.Task[Any]"] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(
        self,
        coro: Awaitable[Any],
        on_cancel: Optional[Callable[[], None]] = None,
    ) -> "asyncio.Task[Any]":
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)

        def _done(t: "asyncio.Task[Any]") -> None:
            self._tasks.discard(t)
            if t.cancelled():
                if on_cancel is not None:
                    on_cancel()
                return
            exc = t.exception()
            if exc is not None:
                logger.error("Background task %s failed", t.get_name(), exc_info=exc)

        task.add_done_callback(_done)
        return task

    async def wait(self) -> None:
        """Wait until every tracked task has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel_all(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
