"""FastAPI REST + SSE API for the task stream service."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from taskstream.api.models import (
    AnswerRequest,
    AnswerResponse,
    CancelResponse,
    ErrorResponse,
    HealthResponse,
    StartTaskRequest,
    StartTaskResponse,
    TaskListResponse,
    TaskStatusResponse,
    TaskSummaryResponse,
)
from taskstream.api.sse import QueueObserver, observer_response, parse_last_event_id
from taskstream.models.events import utc_now
from taskstream.models.state import TaskStatus
from taskstream.services.driver import TaskDriver
from taskstream.services.question_coordinator import QuestionCoordinator
from taskstream.services.sweeper import LifecycleSweeper
from taskstream.services.task_registry import QuestionNotPendingError, TaskRegistry
from taskstream.services.task_store import TaskNotFoundError

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def stream_url(task_id: str) -> str:
    return f"{API_PREFIX}/task/{task_id}/stream"


class TaskStreamAPI:
    """REST API and event streams for orchestrated agent tasks."""

    def __init__(
        self,
        registry: TaskRegistry,
        driver: TaskDriver,
        coordinator: QuestionCoordinator,
        sweeper: LifecycleSweeper,
        heartbeat_interval: float = 30.0,
        stream_queue_size: int = 0,
    ):
        """Initialize API with dependencies."""
        if registry is None:
            raise ValueError("registry is required")
        if driver is None:
            raise ValueError("driver is required")
        if coordinator is None:
            raise ValueError("coordinator is required")
        if sweeper is None:
            raise ValueError("sweeper is required")
        if heartbeat_interval <= 0:
            raise ValueError("heartbeat_interval must be positive")
        if stream_queue_size < 0:
            raise ValueError("stream_queue_size must be non-negative")

        self._registry = registry
        self._driver = driver
        self._coordinator = coordinator
        self._sweeper = sweeper
        self._heartbeat_interval = heartbeat_interval
        self._stream_queue_size = stream_queue_size

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        self._sweeper.start()
        try:
            yield
        finally:
            await self._sweeper.shutdown()
            await self._driver.close()

    def create_app(self) -> FastAPI:
        """Create FastAPI application."""
        app = FastAPI(
            title="Task Stream API",
            description="Runs agent tasks and streams their progress",
            version="1.0.0",
            lifespan=self._lifespan,
        )

        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            logger.debug(f"{request.method} {request.url.path}")
            return await call_next(request)

        @app.get("/health", response_model=HealthResponse)
        def health_check() -> HealthResponse:
            """Health check endpoint."""
            return HealthResponse(
                status="ok",
                timestamp=utc_now(),
                active_tasks=len(self._registry.list_active()),
            )

        @app.post(
            f"{API_PREFIX}/task/start",
            status_code=201,
            response_model=StartTaskResponse,
            responses={422: {"model": ErrorResponse}},
        )
        async def start_task(request: StartTaskRequest) -> StartTaskResponse:
            """Create a task and start running it."""
            task_id = self._driver.submit(request.task, request.config)
            return StartTaskResponse(
                task_id=task_id,
                stream_url=stream_url(task_id),
                status=TaskStatus.PENDING,
            )

        @app.get(
            f"{API_PREFIX}/task/{{task_id}}/status",
            response_model=TaskStatusResponse,
            responses={404: {"model": ErrorResponse}},
        )
        def get_task_status(task_id: str) -> TaskStatusResponse:
            """Get task status."""
            try:
                task = self._registry.get(task_id)
            except TaskNotFoundError:
                raise HTTPException(status_code=404, detail="Task not found")
            return TaskStatusResponse.from_task(task)

        @app.get(
            f"{API_PREFIX}/task/{{task_id}}/stream",
            responses={404: {"model": ErrorResponse}},
        )
        async def stream_task(
            task_id: str,
            last_event_id: str | None = Header(default=None),
        ):
            """Replay the task's events, then stream new ones."""
            observer = QueueObserver(maxsize=self._stream_queue_size)
            registered = self._registry.register_observer(
                task_id, observer, parse_last_event_id(last_event_id)
            )
            if not registered:
                return JSONResponse(
                    status_code=404, content={"detail": "Task not found"}
                )

            return observer_response(
                observer,
                on_disconnect=lambda: self._registry.unregister_observer(
                    task_id, observer
                ),
                heartbeat_interval=self._heartbeat_interval,
            )

        @app.post(
            f"{API_PREFIX}/task/{{task_id}}/answer",
            response_model=AnswerResponse,
            responses={404: {"model": ErrorResponse}},
        )
        def answer_question(task_id: str, request: AnswerRequest) -> AnswerResponse:
            """Answer a task's pending question."""
            try:
                self._coordinator.answer(task_id, request.answer, request.question_id)
            except QuestionNotPendingError:
                raise HTTPException(
                    status_code=404,
                    detail="No pending question found for this task",
                )
            return AnswerResponse(success=True, message="Answer submitted successfully")

        @app.post(
            f"{API_PREFIX}/task/{{task_id}}/cancel",
            response_model=CancelResponse,
            responses={404: {"model": ErrorResponse}},
        )
        def cancel_task(task_id: str) -> CancelResponse:
            """Cancel a task that has not finished yet."""
            if not self._registry.cancel(task_id):
                raise HTTPException(
                    status_code=404, detail="Task not found or already completed"
                )
            return CancelResponse(
                success=True, message="Task cancelled successfully", task_id=task_id
            )

        @app.get(f"{API_PREFIX}/tasks", response_model=TaskListResponse)
        def list_tasks() -> TaskListResponse:
            """List all known tasks."""
            return TaskListResponse(
                tasks=[
                    TaskSummaryResponse.from_task(task)
                    for task in self._registry.list_all()
                ]
            )

        return app
