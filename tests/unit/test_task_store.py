"""Unit tests for the in-memory task store."""

from datetime import timedelta

import pytest

from taskstream.models.events import utc_now
from taskstream.models.state import TaskConfig
from taskstream.models.task import Task
from taskstream.services.task_store import InMemoryTaskStore, TaskNotFoundError


def create_task(task_id: str = "task-1", age: int = 0) -> Task:
    """Create a Task created `age` seconds ago."""
    return Task(
        task_id=task_id,
        description="do something",
        config=TaskConfig(),
        created_at=utc_now() - timedelta(seconds=age),
    )


@pytest.fixture
def store():
    return InMemoryTaskStore()


class TestInMemoryTaskStore:
    """Tests for InMemoryTaskStore."""

    def test_add_and_get(self, store):
        task = create_task()

        store.add(task)

        assert store.get("task-1") is task
        assert "task-1" in store
        assert len(store) == 1

    def test_get_unknown_returns_none(self, store):
        assert store.get("missing") is None

    def test_add_requires_task(self, store):
        with pytest.raises(ValueError, match="task is required"):
            store.add(None)

    def test_add_rejects_duplicate(self, store):
        store.add(create_task())

        with pytest.raises(ValueError, match="already exists"):
            store.add(create_task())

    def test_values_are_oldest_first(self, store):
        store.add(create_task("new", age=0))
        store.add(create_task("old", age=10))

        assert [t.task_id for t in store.values()] == ["old", "new"]

    def test_remove(self, store):
        task = create_task()
        store.add(task)

        assert store.remove("task-1") is task
        assert store.remove("task-1") is None

    def test_clear(self, store):
        store.add(create_task("a"))
        store.add(create_task("b"))

        store.clear()

        assert len(store) == 0


class TestTaskNotFoundError:
    def test_carries_task_id(self):
        error = TaskNotFoundError("task-9")

        assert error.task_id == "task-9"
        assert "task-9" in str(error)
