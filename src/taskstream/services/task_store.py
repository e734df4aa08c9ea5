"""Storage for task records."""

from typing import Protocol

from taskstream.models.task import Task


class TaskNotFoundError(Exception):
    """Raised when task is not found."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


class TaskStore(Protocol):
    """Keyed storage for Task records."""

    def add(self, task: Task) -> None: ...

    def get(self, task_id: str) -> Task | None: ...

    def remove(self, task_id: str) -> Task | None: ...

    def values(self) -> list[Task]: ...

    def clear(self) -> None: ...


class InMemoryTaskStore:
    """Dict-backed store. Lives and dies with the process."""

    def __init__(self):
        self._tasks: dict[str, Task] = {}

    def add(self, task: Task) -> None:
        """Insert a new task."""
        if task is None:
            raise ValueError("task is required")
        if task.task_id in self._tasks:
            raise ValueError(f"Task already exists: {task.task_id}")
        self._tasks[task.task_id] = task

    def get(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def remove(self, task_id: str) -> Task | None:
        return self._tasks.pop(task_id, None)

    def values(self) -> list[Task]:
        """All tasks, oldest first."""
        return sorted(self._tasks.values(), key=lambda t: t.created_at)

    def clear(self) -> None:
        self._tasks.clear()

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks
