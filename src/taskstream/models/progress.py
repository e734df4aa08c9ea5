"""Progress items produced by an agent worker during a turn."""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

ASK_QUESTION_TOOL = "ask_question"


class ProgressKind(str, Enum):
    """Kinds of items a worker can emit."""

    THOUGHT = "thought"
    CONTENT = "content"
    TOOL_CALL_REQUEST = "tool_call_request"
    TOOL_CALL_RESPONSE = "tool_call_response"
    ERROR = "error"
    CANCELLED = "cancelled"
    LOOP_DETECTED = "loop_detected"
    OTHER = "other"


class _Item(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ThoughtItem(_Item):
    kind: Literal["thought"] = "thought"
    value: Any


class ContentDelta(_Item):
    kind: Literal["content"] = "content"
    text: str


class ToolCallRequest(_Item):
    kind: Literal["tool_call_request"] = "tool_call_request"
    call_id: str
    name: str
    args: dict[str, Any] = {}


class ToolCallResponse(_Item):
    kind: Literal["tool_call_response"] = "tool_call_response"
    call_id: str
    result: Any = None
    error: str | None = None


class WorkerFailure(_Item):
    kind: Literal["error"] = "error"
    message: str
    status: str | None = None


class WorkerCancelled(_Item):
    kind: Literal["cancelled"] = "cancelled"


class LoopDetected(_Item):
    kind: Literal["loop_detected"] = "loop_detected"


class OtherItem(_Item):
    """Worker bookkeeping (retries, compression, finish markers, ...)."""

    kind: Literal["other"] = "other"
    name: str = "unknown"
    value: Any = None


ProgressItem = Annotated[
    Union[
        ThoughtItem,
        ContentDelta,
        ToolCallRequest,
        ToolCallResponse,
        WorkerFailure,
        WorkerCancelled,
        LoopDetected,
        OtherItem,
    ],
    Field(discriminator="kind"),
]

progress_item_adapter: TypeAdapter[ProgressItem] = TypeAdapter(ProgressItem)


def parse_progress_item(data: dict[str, Any]) -> ProgressItem:
    """Parse a raw worker item. Unrecognised kinds become OtherItem."""
    try:
        return progress_item_adapter.validate_python(data)
    except ValidationError:
        kind = data.get("kind")
        known = {k.value for k in ProgressKind}
        if kind in known:
            raise
        return OtherItem(name=str(kind), value=data)
