"""Eviction of finished tasks and shutdown of live ones."""

import asyncio
import logging
from datetime import datetime, timedelta

from taskstream.models.events import utc_now
from taskstream.services.task_registry import TaskRegistry

logger = logging.getLogger(__name__)


class LifecycleSweeper:
    """Periodically drops terminal tasks older than the retention window."""

    def __init__(
        self,
        registry: TaskRegistry,
        interval: float = 60.0,
        retention: float = 3600.0,
    ):
        if registry is None:
            raise ValueError("registry is required")
        if interval <= 0:
            raise ValueError("interval must be positive")
        if retention < 0:
            raise ValueError("retention must be non-negative")

        self._registry = registry
        self._interval = interval
        self._retention = timedelta(seconds=retention)
        self._loop_task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def sweep(self, now: datetime | None = None) -> int:
        """Evict expired terminal tasks. Returns how many were removed."""
        now = now or utc_now()
        expired = [
            task.task_id
            for task in self._registry.list_all()
            if task.is_terminal
            and task.completed_at is not None
            and now - task.completed_at > self._retention
        ]
        for task_id in expired:
            self._registry.remove(task_id)

        if expired:
            logger.info(f"Cleaned up {len(expired)} old tasks")
        return len(expired)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.sweep()
            except Exception as e:
                logger.error(f"Sweep failed: {e}")

    def start(self) -> None:
        """Start the periodic sweep on the running loop."""
        if self.running:
            return
        self._loop_task = asyncio.create_task(self._run(), name="task-sweeper")
        logger.info(
            f"Sweeper started (interval={self._interval}s, "
            f"retention={self._retention.total_seconds()}s)"
        )

    async def stop(self) -> None:
        if self._loop_task is None:
            return
        self._loop_task.cancel()
        try:
            await self._loop_task
        except asyncio.CancelledError:
            pass
        self._loop_task = None

    async def shutdown(self) -> int:
        """Stop sweeping, cancel every active task and clear the registry.

        Cancellation is only requested; nothing waits for workers to stop.
        Returns the number of tasks cancelled.
        """
        await self.stop()
        active = self._registry.list_active()
        cancelled = sum(
            1
            for task in active
            if self._registry.cancel(task.task_id, "Service shutting down")
        )
        self._registry.clear()
        logger.info(f"Shutdown: cancelled {cancelled} active task(s)")
        return cancelled
