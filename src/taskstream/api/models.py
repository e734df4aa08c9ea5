"""Request and response models for REST API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from taskstream.models.state import TaskConfig, TaskStatus
from taskstream.models.task import Task


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StartTaskRequest(_ApiModel):
    """Request to start a task."""

    model_config = ConfigDict(extra="forbid")

    task: str
    config: TaskConfig | None = None

    @field_validator("task")
    @classmethod
    def task_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("task is required")
        return v


class StartTaskResponse(_ApiModel):
    """Response from task start."""

    model_config = ConfigDict(frozen=True)

    task_id: str
    stream_url: str
    status: TaskStatus


class AnswerRequest(_ApiModel):
    """Answer to a task's pending question."""

    answer: str
    question_id: str | None = None

    @field_validator("answer")
    @classmethod
    def answer_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("answer is required")
        return v


class AnswerResponse(_ApiModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    message: str


class CancelResponse(_ApiModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    task_id: str


class PendingQuestionResponse(_ApiModel):
    model_config = ConfigDict(frozen=True)

    question_id: str
    question: str
    context: str | None = None


class TaskSummaryResponse(_ApiModel):
    """One entry of the task list."""

    model_config = ConfigDict(frozen=True)

    task_id: str
    status: TaskStatus
    task: str
    created_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None
    has_pending_question: bool

    @classmethod
    def from_task(cls, task: Task) -> "TaskSummaryResponse":
        return cls(
            task_id=task.task_id,
            status=task.status,
            task=task.description,
            created_at=task.created_at,
            started_at=task.started_at,
            completed_at=task.completed_at,
            has_pending_question=task.has_pending_question,
        )


class TaskStatusResponse(_ApiModel):
    """Response for task status."""

    model_config = ConfigDict(frozen=True)

    task_id: str
    status: TaskStatus
    task: str
    created_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None
    result: str | None = None
    error: str | None = None
    has_pending_question: bool
    pending_question: PendingQuestionResponse | None = None

    @classmethod
    def from_task(cls, task: Task) -> "TaskStatusResponse":
        pending = task.pending_question
        return cls(
            task_id=task.task_id,
            status=task.status,
            task=task.description,
            created_at=task.created_at,
            started_at=task.started_at,
            completed_at=task.completed_at,
            result=task.result,
            error=task.error,
            has_pending_question=pending is not None,
            pending_question=(
                PendingQuestionResponse(
                    question_id=pending.question_id,
                    question=pending.question,
                    context=pending.context,
                )
                if pending is not None
                else None
            ),
        )


class TaskListResponse(_ApiModel):
    model_config = ConfigDict(frozen=True)

    tasks: list[TaskSummaryResponse]


class ErrorResponse(BaseModel):
    """Error response."""

    model_config = ConfigDict(frozen=True)

    detail: str


class HealthResponse(_ApiModel):
    """Health check response."""

    model_config = ConfigDict(frozen=True)

    status: str
    timestamp: datetime
    active_tasks: int
