"""Unit tests for QuestionCoordinator."""

import asyncio

import pytest

from taskstream.models.events import QuestionEvent
from taskstream.models.state import TaskStatus
from taskstream.models.task import TaskCancelledError
from taskstream.services.broadcaster import EventBroadcaster
from taskstream.services.question_coordinator import QuestionCoordinator
from taskstream.services.task_registry import (
    QuestionAlreadyPendingError,
    QuestionNotPendingError,
    TaskRegistry,
)
from taskstream.services.task_store import InMemoryTaskStore


@pytest.fixture
def registry():
    store = InMemoryTaskStore()
    return TaskRegistry(store, EventBroadcaster(store))


@pytest.fixture
def coordinator(registry):
    return QuestionCoordinator(registry)


@pytest.fixture
def running_task(registry):
    task_id = registry.create("Paint the fence")
    registry.set_status(task_id, TaskStatus.RUNNING)
    return task_id


async def wait_for_question(registry, task_id: str):
    """Yield to the loop until the task has a pending question."""
    for _ in range(100):
        task = registry.get(task_id)
        if task.pending_question is not None:
            return task.pending_question
        await asyncio.sleep(0)
    raise AssertionError("question never became pending")


class TestQuestionCoordinatorInit:
    def test_requires_registry(self):
        with pytest.raises(ValueError, match="registry is required"):
            QuestionCoordinator(None)


class TestSuspend:
    """Tests for suspend and answer."""

    @pytest.mark.asyncio
    async def test_answer_resumes_asker(self, registry, coordinator, running_task):
        asker = asyncio.create_task(
            coordinator.suspend(running_task, "Which color?", "Fence is wood")
        )
        pending = await wait_for_question(registry, running_task)

        task = registry.get(running_task)
        assert task.status == TaskStatus.WAITING_FOR_ANSWER
        question = [e for e in task.events if isinstance(e, QuestionEvent)][-1]
        assert question.question_id == pending.question_id
        assert question.context == "Fence is wood"
        assert coordinator.pending_count() == 1

        question_id = coordinator.answer(running_task, "Blue")

        assert await asker == "Blue"
        assert question_id == pending.question_id
        assert registry.get(running_task).status == TaskStatus.RUNNING
        assert coordinator.pending_count() == 0

    @pytest.mark.asyncio
    async def test_question_event_precedes_waiting_status(
        self, registry, coordinator, running_task
    ):
        asker = asyncio.create_task(coordinator.suspend(running_task, "Which?"))
        await wait_for_question(registry, running_task)

        types = [e.type for e in registry.get(running_task).events]
        assert types[-2:] == ["question", "status"]

        coordinator.answer(running_task, "That one")
        await asker

    @pytest.mark.asyncio
    async def test_cancel_raises_in_asker(self, registry, coordinator, running_task):
        asker = asyncio.create_task(coordinator.suspend(running_task, "Which?"))
        await wait_for_question(registry, running_task)

        registry.cancel(running_task)

        with pytest.raises(TaskCancelledError):
            await asker
        assert coordinator.pending_count() == 0

    @pytest.mark.asyncio
    async def test_cancelled_task_cannot_ask(self, registry, coordinator, running_task):
        registry.cancel(running_task)

        with pytest.raises(TaskCancelledError):
            await coordinator.suspend(running_task, "Which?")

    @pytest.mark.asyncio
    async def test_second_question_rejected(self, registry, coordinator, running_task):
        asker = asyncio.create_task(coordinator.suspend(running_task, "First?"))
        await wait_for_question(registry, running_task)
        event_count = len(registry.get(running_task).events)

        with pytest.raises(QuestionAlreadyPendingError):
            await coordinator.suspend(running_task, "Second?")

        assert len(registry.get(running_task).events) == event_count
        coordinator.answer(running_task, "ok")
        await asker

    @pytest.mark.asyncio
    async def test_blank_question_rejected(self, coordinator, running_task):
        with pytest.raises(ValueError, match="question is required"):
            await coordinator.suspend(running_task, " ")


class TestAnswer:
    """Tests for answer without a matching question."""

    def test_no_pending_question(self, coordinator, running_task):
        with pytest.raises(QuestionNotPendingError):
            coordinator.answer(running_task, "Blue")

    def test_unknown_task(self, coordinator):
        with pytest.raises(QuestionNotPendingError):
            coordinator.answer("missing", "Blue")

    @pytest.mark.asyncio
    async def test_mismatched_question_id(self, registry, coordinator, running_task):
        asker = asyncio.create_task(coordinator.suspend(running_task, "Which?"))
        await wait_for_question(registry, running_task)

        with pytest.raises(QuestionNotPendingError):
            coordinator.answer(running_task, "Blue", question_id="other")

        assert registry.get(running_task).status == TaskStatus.WAITING_FOR_ANSWER
        coordinator.answer(running_task, "Blue")
        await asker

    @pytest.mark.asyncio
    async def test_second_answer_rejected(self, registry, coordinator, running_task):
        asker = asyncio.create_task(coordinator.suspend(running_task, "Which?"))
        await wait_for_question(registry, running_task)

        coordinator.answer(running_task, "Blue")
        with pytest.raises(QuestionNotPendingError):
            coordinator.answer(running_task, "Red")

        assert await asker == "Blue"
