"""In-memory task records."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from taskstream.models.events import TaskEvent, utc_now
from taskstream.models.state import TaskConfig, TaskStatus


class TaskCancelledError(Exception):
    """Raised into code that was waiting on a task that got cancelled."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task cancelled: {task_id}")


class CancellationToken:
    """Cooperative stop signal shared between the driver and the worker."""

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "Task cancelled by user") -> None:
        if self._event.is_set():
            return
        self.reason = reason
        self._event.set()

    async def wait(self) -> None:
        """Block until cancellation is requested."""
        await self._event.wait()


class Observer(Protocol):
    """A live sink for one task's events, owned by its transport."""

    def send(self, event: TaskEvent, sequence: int) -> None:
        """Deliver one event. Raises if the sink can no longer accept it."""

    def close(self) -> None:
        """End the stream. Must be safe to call more than once."""


@dataclass(eq=False)
class PendingQuestion:
    """An outstanding question and the handle that resumes its asker."""

    question_id: str
    question: str
    context: str | None
    answer_future: asyncio.Future

    def resolve(self, answer: str) -> None:
        if not self.answer_future.done():
            self.answer_future.set_result(answer)

    def abandon(self, task_id: str) -> None:
        if not self.answer_future.done():
            self.answer_future.set_exception(TaskCancelledError(task_id))


@dataclass(eq=False)
class Task:
    """One orchestrated unit of worker execution."""

    task_id: str
    description: str
    config: TaskConfig
    status: TaskStatus = TaskStatus.PENDING
    created_at: datetime = field(default_factory=utc_now)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    result: str | None = None
    error: str | None = None
    cancellation_token: CancellationToken = field(default_factory=CancellationToken)
    observers: set[Observer] = field(default_factory=set)
    pending_question: PendingQuestion | None = None
    events: list[TaskEvent] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def has_pending_question(self) -> bool:
        return self.pending_question is not None
