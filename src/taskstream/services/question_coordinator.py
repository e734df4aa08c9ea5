"""Suspend/resume around questions the worker asks its caller."""

import asyncio
import logging
import uuid

from taskstream.models.events import QuestionEvent
from taskstream.models.task import PendingQuestion, TaskCancelledError
from taskstream.services.task_registry import (
    QuestionAlreadyPendingError,
    QuestionNotPendingError,
    TaskRegistry,
)

logger = logging.getLogger(__name__)


class QuestionCoordinator:
    """Correlates questions with answers, keyed by (task_id, question_id).

    At most one question is outstanding per task. ``suspend`` is awaited by
    whoever asked; ``answer`` is called by the transport and is the only way
    to resume it.
    """

    def __init__(self, registry: TaskRegistry):
        if registry is None:
            raise ValueError("registry is required")
        self._registry = registry
        self._pending: dict[tuple[str, str], PendingQuestion] = {}

    def pending_count(self) -> int:
        return len(self._pending)

    async def suspend(
        self, task_id: str, question: str, context: str | None = None
    ) -> str:
        """Publish a question and wait for its answer.

        Raises TaskCancelledError if the task is (or becomes) cancelled.
        """
        if not question or not question.strip():
            raise ValueError("question is required")

        task = self._registry.get(task_id)
        if task.is_terminal or task.cancellation_token.cancelled:
            raise TaskCancelledError(task_id)
        if task.pending_question is not None:
            raise QuestionAlreadyPendingError(task_id)

        loop = asyncio.get_running_loop()
        pending = PendingQuestion(
            question_id=str(uuid.uuid4()),
            question=question,
            context=context,
            answer_future=loop.create_future(),
        )
        key = (task_id, pending.question_id)

        self._registry.append(
            task_id,
            QuestionEvent(
                task_id=task_id,
                question_id=pending.question_id,
                question=question,
                context=context,
            ),
        )
        self._registry.set_pending_question(task_id, pending)
        self._pending[key] = pending
        logger.info(f"Task {task_id} waiting for answer to {pending.question_id}")

        try:
            answer = await pending.answer_future
        finally:
            self._pending.pop(key, None)

        logger.info(f"Task {task_id} resumed after {pending.question_id}")
        return answer

    def answer(
        self, task_id: str, answer: str, question_id: str | None = None
    ) -> str:
        """Resolve the task's pending question. Returns its question_id."""
        if answer is None:
            raise ValueError("answer is required")

        task = self._registry.find(task_id)
        if task is None or task.pending_question is None:
            raise QuestionNotPendingError(task_id)
        current = task.pending_question
        if question_id is not None and current.question_id != question_id:
            raise QuestionNotPendingError(task_id)

        pending = self._registry.clear_pending_question(task_id)
        self._pending.pop((task_id, pending.question_id), None)
        pending.resolve(answer)
        return pending.question_id
