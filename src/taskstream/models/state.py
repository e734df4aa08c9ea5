"""State models for task tracking."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic.alias_generators import to_camel


class TaskStatus(str, Enum):
    """Task execution status."""

    PENDING = "pending"
    RUNNING = "running"
    WAITING_FOR_ANSWER = "waiting_for_answer"
    COMPLETED = "completed"
    ERROR = "error"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {TaskStatus.COMPLETED, TaskStatus.ERROR, TaskStatus.CANCELLED}
)

# Allowed status transitions. Anything not listed is a logic error.
TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.PENDING: frozenset({TaskStatus.RUNNING, TaskStatus.CANCELLED}),
    TaskStatus.RUNNING: frozenset(
        {
            TaskStatus.WAITING_FOR_ANSWER,
            TaskStatus.COMPLETED,
            TaskStatus.ERROR,
            TaskStatus.CANCELLED,
        }
    ),
    TaskStatus.WAITING_FOR_ANSWER: frozenset(
        {TaskStatus.RUNNING, TaskStatus.CANCELLED}
    ),
    TaskStatus.COMPLETED: frozenset(),
    TaskStatus.ERROR: frozenset(),
    TaskStatus.CANCELLED: frozenset(),
}


def can_transition(current: TaskStatus, target: TaskStatus) -> bool:
    """Check whether current -> target is a legal transition."""
    return target in TRANSITIONS[current]


class ApprovalMode(str, Enum):
    """How the worker treats tool calls that need approval."""

    AUTO = "auto"
    MANUAL = "manual"


class TaskConfig(BaseModel):
    """Per-task options. Unset options fall back to service defaults."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    model: str | None = None
    max_turns: int | None = Field(default=None, ge=1)
    approval_mode: ApprovalMode | None = None
    allowed_tools: list[str] | None = None
    working_directory: str | None = None
    timeout_minutes: float | None = Field(default=None, gt=0)
    credentials: SecretStr | None = None
    base_url: str | None = None

    def with_defaults(self, defaults: "TaskConfig") -> "TaskConfig":
        """Return a copy with every unset option taken from defaults."""
        merged = defaults.model_dump(exclude_none=True)
        merged.update(self.model_dump(exclude_none=True))
        return TaskConfig.model_validate(merged)
