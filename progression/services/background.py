"""
Background work for best-effort progression updates

Achievement special checks, leaderboard updates and challenge progress run
after the critical path commits. They are fired as asyncio tasks so they
never block or roll back the caller; failures are logged and counted.
"""

import asyncio
import logging
from typing import Awaitable, Optional, Set

from progression.observability.metrics import (
    background_task_failures_total,
    background_tasks_in_progress,
)

logger = logging.getLogger(__name__)


class BackgroundDispatcher:
    """Tracks fire-and-forget tasks so they can be drained on shutdown"""

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, name: str, coro: Awaitable) -> asyncio.Task:
        """Schedule `coro` on the running loop"""
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        background_tasks_in_progress.inc()
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        background_tasks_in_progress.dec()

        if task.cancelled():
            logger.warning(f"Background task {task.get_name()} was cancelled")
            return

        error = task.exception()
        if error is not None:
            background_task_failures_total.labels(task=task.get_name().split(":")[0]).inc()
            logger.error(
                f"Background task {task.get_name()} failed: {error}",
                exc_info=(type(error), error, error.__traceback__)
            )

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for outstanding tasks; cancel whatever is left after `timeout`"""
        if not self._tasks:
            return

        logger.info(f"Waiting for {len(self._tasks)} background task(s)")
        done, still_running = await asyncio.wait(set(self._tasks), timeout=timeout)

        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning(f"Cancelled {len(still_running)} background task(s) on shutdown")
            await asyncio.gather(*still_running, return_exceptions=True)
