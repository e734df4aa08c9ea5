"""Authoritative task state: status machine, event log and observers."""

import logging
import uuid

from taskstream.models.events import StatusEvent, TaskEvent, utc_now
from taskstream.models.state import TaskConfig, TaskStatus, can_transition
from taskstream.models.task import Observer, PendingQuestion, Task
from taskstream.services.broadcaster import EventBroadcaster
from taskstream.services.task_store import TaskNotFoundError, TaskStore

logger = logging.getLogger(__name__)


class InvalidTransitionError(Exception):
    """Raised when a status change is not allowed by the state machine."""

    def __init__(self, task_id: str, current: TaskStatus, target: TaskStatus):
        self.task_id = task_id
        self.current = current
        self.target = target
        super().__init__(
            f"Invalid transition for task {task_id}: "
            f"{current.value} -> {target.value}"
        )


class QuestionNotPendingError(Exception):
    """Raised when there is no pending question to answer."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"No pending question for task: {task_id}")


class QuestionAlreadyPendingError(Exception):
    """Raised when a second question is raised while one is outstanding."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task already has a pending question: {task_id}")


class TaskRegistry:
    """Owns every Task record and every change made to one."""

    def __init__(self, store: TaskStore, broadcaster: EventBroadcaster):
        if store is None:
            raise ValueError("store is required")
        if broadcaster is None:
            raise ValueError("broadcaster is required")
        self._store = store
        self._broadcaster = broadcaster

    def create(self, description: str, config: TaskConfig | None = None) -> str:
        """Create a new task in pending state and return its id."""
        if not description or not description.strip():
            raise ValueError("description is required")

        task_id = str(uuid.uuid4())
        task = Task(
            task_id=task_id,
            description=description,
            config=config or TaskConfig(),
        )
        self._store.add(task)
        logger.info(f"Created task {task_id}")
        return task_id

    def get(self, task_id: str) -> Task:
        """Get task by ID."""
        if not task_id:
            raise ValueError("task_id is required")
        task = self._store.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def find(self, task_id: str) -> Task | None:
        """Get task by ID, or None."""
        return self._store.get(task_id)

    def list_all(self) -> list[Task]:
        return self._store.values()

    def list_active(self) -> list[Task]:
        return [t for t in self._store.values() if not t.is_terminal]

    def append(self, task_id: str, event: TaskEvent) -> bool:
        """Log an event and fan it out.

        Late events for a task that no longer exists are dropped.
        """
        task = self._store.get(task_id)
        if task is None:
            logger.debug(f"Dropping {event.type} event for unknown task {task_id}")
            return False
        task.events.append(event)
        self._broadcaster.broadcast(task_id, event, len(task.events))
        return True

    def set_status(
        self, task_id: str, status: TaskStatus, message: str | None = None
    ) -> bool:
        """Move a task to a new status and broadcast a status event.

        Returns False if the task is unknown or already terminal. Raises
        InvalidTransitionError for any other illegal transition.
        """
        task = self._store.get(task_id)
        if task is None:
            return False
        if task.is_terminal:
            logger.debug(
                f"Ignoring {status.value} for task {task_id}: "
                f"already {task.status.value}"
            )
            return False
        if not can_transition(task.status, status):
            raise InvalidTransitionError(task_id, task.status, status)

        task.status = status
        now = utc_now()
        if status == TaskStatus.RUNNING and task.started_at is None:
            task.started_at = now
        elif status.is_terminal and task.completed_at is None:
            task.completed_at = now

        logger.info(f"Task {task_id} -> {status.value}")
        self.append(
            task_id, StatusEvent(task_id=task_id, status=status, message=message)
        )

        if status.is_terminal:
            # Streams end after the terminal status event.
            self._broadcaster.close_all(task_id)
        return True

    def set_result(self, task_id: str, result: str) -> bool:
        """Store the result and complete the task."""
        task = self._store.get(task_id)
        if task is None or task.is_terminal:
            return False
        task.result = result
        return self.set_status(
            task_id, TaskStatus.COMPLETED, "Task completed successfully"
        )

    def set_error(self, task_id: str, error: str) -> bool:
        """Store the error and fail the task."""
        task = self._store.get(task_id)
        if task is None or task.is_terminal:
            return False
        task.error = error
        return self.set_status(task_id, TaskStatus.ERROR, error)

    def cancel(self, task_id: str, reason: str = "Task cancelled by user") -> bool:
        """Request cooperative cancellation.

        Returns False if the task is unknown or already terminal.
        """
        task = self._store.get(task_id)
        if task is None or task.is_terminal:
            return False

        task.cancellation_token.cancel(reason)
        if task.pending_question is not None:
            pending = task.pending_question
            task.pending_question = None
            pending.abandon(task_id)
        return self.set_status(task_id, TaskStatus.CANCELLED, reason)

    def set_pending_question(self, task_id: str, pending: PendingQuestion) -> None:
        """Attach a question and move the task to waiting_for_answer."""
        task = self.get(task_id)
        if task.pending_question is not None:
            raise QuestionAlreadyPendingError(task_id)
        if not can_transition(task.status, TaskStatus.WAITING_FOR_ANSWER):
            raise InvalidTransitionError(
                task_id, task.status, TaskStatus.WAITING_FOR_ANSWER
            )
        task.pending_question = pending
        self.set_status(task_id, TaskStatus.WAITING_FOR_ANSWER)

    def clear_pending_question(self, task_id: str) -> PendingQuestion:
        """Detach the pending question and move the task back to running."""
        task = self._store.get(task_id)
        if task is None or task.pending_question is None:
            raise QuestionNotPendingError(task_id)
        pending = task.pending_question
        task.pending_question = None
        self.set_status(
            task_id, TaskStatus.RUNNING, "Question answered, resuming task"
        )
        return pending

    def register_observer(
        self, task_id: str, sink: Observer, last_event_id: int = 0
    ) -> bool:
        """Replay the task's log to sink, then attach it for live events.

        Replay starts after last_event_id. A sink registered on a terminal
        task gets the replay and is closed, as is a sink that fails during
        replay; neither is attached. Returns False for unknown task.
        """
        task = self._store.get(task_id)
        if task is None:
            return False

        if not self._broadcaster.replay(task_id, sink, last_event_id):
            return True
        if task.is_terminal:
            sink.close()
            return True
        return self._broadcaster.attach(task_id, sink)

    def unregister_observer(self, task_id: str, sink: Observer) -> None:
        self._broadcaster.detach(task_id, sink)

    def remove(self, task_id: str) -> bool:
        """Close a task's observers and drop it from the store."""
        if self._store.get(task_id) is None:
            return False
        self._broadcaster.close_all(task_id)
        self._store.remove(task_id)
        return True

    def clear(self) -> None:
        for task in self._store.values():
            self._broadcaster.close_all(task.task_id)
        self._store.clear()
