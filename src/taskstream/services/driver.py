"""Per-task coroutine that runs the worker and routes its output."""

import asyncio
import functools
import logging
from contextlib import aclosing

from taskstream.models.events import CompletedEvent, ErrorEvent
from taskstream.models.settings import Confidence
from taskstream.models.state import TaskConfig, TaskStatus
from taskstream.models.task import Task, TaskCancelledError
from taskstream.services.event_transform import REASON_TURN_LIMIT, EventTransformer
from taskstream.services.log_service import task_logger
from taskstream.services.question_coordinator import QuestionCoordinator
from taskstream.services.question_detector import QuestionDetection, QuestionDetector
from taskstream.services.task_registry import TaskRegistry
from taskstream.services.worker import AgentWorker, TurnRequest

logger = logging.getLogger(__name__)

DEFAULT_RESULT = "Task completed"


class TaskDriver:
    """Submits tasks and drives each one to a terminal state.

    One coroutine per task: pull items from the worker, transform, log and
    broadcast them, and suspend on a detected question until it is
    answered. Cancellation is checked between items.
    """

    def __init__(
        self,
        registry: TaskRegistry,
        coordinator: QuestionCoordinator,
        worker: AgentWorker,
        defaults: TaskConfig | None = None,
        detector: QuestionDetector | None = None,
        min_confidence: Confidence = Confidence.LOW,
    ):
        if registry is None:
            raise ValueError("registry is required")
        if coordinator is None:
            raise ValueError("coordinator is required")
        if worker is None:
            raise ValueError("worker is required")

        self._registry = registry
        self._coordinator = coordinator
        self._worker = worker
        self._defaults = defaults or TaskConfig()
        self._detector = detector or QuestionDetector()
        self._min_confidence = min_confidence
        self._runs: dict[str, asyncio.Task] = {}

    def submit(self, description: str, config: TaskConfig | None = None) -> str:
        """Create a task and start driving it in the background.

        Must be called from a running event loop.
        """
        task_id = self._registry.create(description, config)
        run = asyncio.create_task(self.run(task_id), name=f"task-{task_id}")
        self._runs[task_id] = run
        run.add_done_callback(lambda _: self._runs.pop(task_id, None))
        return task_id

    def running_count(self) -> int:
        return len(self._runs)

    async def run(self, task_id: str) -> None:
        """Drive one task until it completes, fails or is cancelled."""
        task = self._registry.find(task_id)
        if task is None:
            logger.warning(f"Task {task_id} vanished before it started")
            return
        log = task_logger(logger, task_id)
        transformer = EventTransformer(task_id)
        token = task.cancellation_token

        try:
            if not self._registry.set_status(
                task_id, TaskStatus.RUNNING, "Task execution started"
            ):
                log.info("Not started: task already finished")
                return

            await self._run_turns(task, transformer)

            if token.cancelled:
                log.info("Stopped after cancellation")
                return
            if transformer.failure is not None:
                self._registry.set_error(task_id, transformer.failure.error)
                return

            result = transformer.content_buffer or DEFAULT_RESULT
            self._registry.append(
                task_id,
                CompletedEvent(
                    task_id=task_id,
                    result=result,
                    final_text=transformer.content_buffer,
                ),
            )
            self._registry.set_result(task_id, result)
        except TaskCancelledError:
            log.info("Cancelled while waiting for an answer")
        except asyncio.CancelledError:
            self._registry.cancel(task_id, "Task interrupted by shutdown")
            raise
        except Exception as e:
            if token.cancelled:
                log.info(f"Worker stopped after cancellation: {e}")
                self._registry.set_status(
                    task_id, TaskStatus.CANCELLED, "Task was cancelled"
                )
                return
            log.error(f"Execution failed: {e}")
            self._registry.append(task_id, ErrorEvent(task_id=task_id, error=str(e)))
            self._registry.set_error(task_id, str(e))

    async def _run_turns(self, task: Task, transformer: EventTransformer) -> None:
        config = task.config.with_defaults(self._defaults)
        max_turns = config.max_turns or 1
        token = task.cancellation_token
        ask = functools.partial(self._coordinator.suspend, task.task_id)

        message = task.description
        turn = 0
        while True:
            turn += 1
            transformer.begin_turn()
            request = TurnRequest(
                task_id=task.task_id,
                message=message,
                config=config,
                token=token,
                ask=ask,
                turn=turn,
            )
            await self._consume(request, transformer)

            if token.cancelled or transformer.failure is not None:
                return

            detection = self._detector.detect(
                transformer.pending_tool_calls(), transformer.turn_text
            )
            if not self._should_ask(task.task_id, detection):
                return
            if turn >= max_turns:
                # No turn is left to carry the answer.
                self._registry.append(
                    task.task_id,
                    transformer.fail(
                        f"Turn limit of {max_turns} reached with an unanswered "
                        f"question: {detection.question}",
                        REASON_TURN_LIMIT,
                    ),
                )
                return
            message = await self._coordinator.suspend(
                task.task_id, detection.question, detection.context
            )

    async def _consume(
        self, request: TurnRequest, transformer: EventTransformer
    ) -> None:
        async with aclosing(self._worker.run_turn(request)) as items:
            async for item in items:
                if request.token.cancelled:
                    break
                event = transformer.transform(item)
                if event is not None:
                    self._registry.append(request.task_id, event)

    def _should_ask(self, task_id: str, detection: QuestionDetection) -> bool:
        if not detection.is_question or not detection.question:
            return False
        if detection.confidence.rank < self._min_confidence.rank:
            task_logger(logger, task_id).info(
                f"Ignoring {detection.confidence.value}-confidence question "
                f"({detection.method.value}): {detection.question!r}"
            )
            return False
        return True

    async def close(self) -> None:
        """Stop every task still being driven."""
        runs = list(self._runs.values())
        for run in runs:
            run.cancel()
        if runs:
            await asyncio.gather(*runs, return_exceptions=True)
        await self._worker.aclose()
