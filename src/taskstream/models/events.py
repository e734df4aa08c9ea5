"""Wire events emitted on a task's stream."""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from taskstream.models.state import TaskStatus


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class EventType(str, Enum):
    """Kinds of events a stream can carry."""

    THOUGHT = "thought"
    CONTENT = "content"
    TOOL_CALL = "tool_call"
    TOOL_RESULT = "tool_result"
    QUESTION = "question"
    COMPLETED = "completed"
    ERROR = "error"
    STATUS = "status"


class BaseEvent(BaseModel):
    """Fields shared by every event."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    task_id: str
    timestamp: datetime = Field(default_factory=utc_now)

    def to_json(self) -> str:
        """Serialize with camelCase keys, omitting unset optionals."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


class ThoughtEvent(BaseEvent):
    type: Literal["thought"] = "thought"
    content: str


class ContentEvent(BaseEvent):
    type: Literal["content"] = "content"
    text: str


class ToolCallEvent(BaseEvent):
    type: Literal["tool_call"] = "tool_call"
    call_id: str
    name: str
    args: dict[str, Any] = {}


class ToolResultEvent(BaseEvent):
    type: Literal["tool_result"] = "tool_result"
    call_id: str
    result: Any = None
    success: bool


class QuestionEvent(BaseEvent):
    type: Literal["question"] = "question"
    question_id: str
    question: str
    context: str | None = None


class CompletedEvent(BaseEvent):
    type: Literal["completed"] = "completed"
    result: str
    final_text: str | None = None


class ErrorEvent(BaseEvent):
    type: Literal["error"] = "error"
    error: str
    reason: str | None = None


class StatusEvent(BaseEvent):
    type: Literal["status"] = "status"
    status: TaskStatus
    message: str | None = None


TaskEvent = Annotated[
    Union[
        ThoughtEvent,
        ContentEvent,
        ToolCallEvent,
        ToolResultEvent,
        QuestionEvent,
        CompletedEvent,
        ErrorEvent,
        StatusEvent,
    ],
    Field(discriminator="type"),
]

task_event_adapter: TypeAdapter[TaskEvent] = TypeAdapter(TaskEvent)


def parse_event(data: str | bytes) -> TaskEvent:
    """Parse a serialized event back into its typed model."""
    return task_event_adapter.validate_json(data)
