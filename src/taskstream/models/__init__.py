"""Models package."""

from taskstream.models.events import (
    BaseEvent,
    CompletedEvent,
    ContentEvent,
    ErrorEvent,
    EventType,
    QuestionEvent,
    StatusEvent,
    TaskEvent,
    ThoughtEvent,
    ToolCallEvent,
    ToolResultEvent,
    parse_event,
)
from taskstream.models.progress import (
    ASK_QUESTION_TOOL,
    ContentDelta,
    LoopDetected,
    OtherItem,
    ProgressItem,
    ProgressKind,
    ThoughtItem,
    ToolCallRequest,
    ToolCallResponse,
    WorkerCancelled,
    WorkerFailure,
    parse_progress_item,
)
from taskstream.models.settings import Confidence, ServiceSettings, WorkerBackend
from taskstream.models.state import (
    TERMINAL_STATUSES,
    ApprovalMode,
    TaskConfig,
    TaskStatus,
    can_transition,
)
from taskstream.models.task import (
    CancellationToken,
    Observer,
    PendingQuestion,
    Task,
    TaskCancelledError,
)

__all__ = [
    "ASK_QUESTION_TOOL",
    "ApprovalMode",
    "BaseEvent",
    "CancellationToken",
    "CompletedEvent",
    "Confidence",
    "ContentDelta",
    "ContentEvent",
    "ErrorEvent",
    "EventType",
    "LoopDetected",
    "Observer",
    "OtherItem",
    "PendingQuestion",
    "ProgressItem",
    "ProgressKind",
    "QuestionEvent",
    "ServiceSettings",
    "StatusEvent",
    "TERMINAL_STATUSES",
    "Task",
    "TaskCancelledError",
    "TaskConfig",
    "TaskEvent",
    "TaskStatus",
    "ThoughtEvent",
    "ThoughtItem",
    "ToolCallEvent",
    "ToolCallRequest",
    "ToolCallResponse",
    "ToolResultEvent",
    "WorkerBackend",
    "WorkerCancelled",
    "WorkerFailure",
    "can_transition",
    "parse_event",
    "parse_progress_item",
]
