"""Conversion of worker progress items into stream events."""

import json
import logging
from dataclasses import dataclass
from typing import Any

from taskstream.models.events import (
    ContentEvent,
    ErrorEvent,
    TaskEvent,
    ThoughtEvent,
    ToolCallEvent,
    ToolResultEvent,
)
from taskstream.models.progress import (
    ContentDelta,
    LoopDetected,
    OtherItem,
    ProgressItem,
    ThoughtItem,
    ToolCallRequest,
    ToolCallResponse,
    WorkerCancelled,
    WorkerFailure,
)

logger = logging.getLogger(__name__)

REASON_WORKER_ERROR = "worker_error"
REASON_USER_CANCELLED = "user_cancelled"
REASON_LOOP_DETECTED = "loop_detected"
REASON_TURN_LIMIT = "turn_limit"


@dataclass(frozen=True)
class ToolCallInfo:
    call_id: str
    name: str
    args: dict[str, Any]


class EventTransformer:
    """Maps one task's progress items to events.

    Keeps the accumulated text (used as the result when the worker gives
    none) and the tool calls seen so far, so responses and unanswered
    calls can be correlated with their requests.
    """

    def __init__(self, task_id: str):
        if not task_id:
            raise ValueError("task_id is required")
        self._task_id = task_id
        self._content_buffer = ""
        self._turn_text = ""
        self._tool_calls: dict[str, ToolCallInfo] = {}
        self._unanswered: dict[str, ToolCallInfo] = {}
        self._failure: ErrorEvent | None = None

    @property
    def content_buffer(self) -> str:
        """All content text across every turn."""
        return self._content_buffer

    @property
    def turn_text(self) -> str:
        """Content text of the current turn only."""
        return self._turn_text

    @property
    def failure(self) -> ErrorEvent | None:
        """First fatal error seen, if any."""
        return self._failure

    def begin_turn(self) -> None:
        """Reset per-turn state before the worker starts a new turn."""
        self._turn_text = ""
        self._unanswered.clear()

    def tool_call(self, call_id: str) -> ToolCallInfo | None:
        return self._tool_calls.get(call_id)

    def pending_tool_calls(self) -> list[ToolCallInfo]:
        """Tool calls requested this turn that never got a response."""
        return list(self._unanswered.values())

    def transform(self, item: ProgressItem) -> TaskEvent | None:
        """Return the event for item, or None if it is not surfaced."""
        if isinstance(item, ThoughtItem):
            content = item.value if isinstance(item.value, str) else json.dumps(
                item.value, default=str
            )
            return ThoughtEvent(task_id=self._task_id, content=content)

        if isinstance(item, ContentDelta):
            self._content_buffer += item.text
            self._turn_text += item.text
            return ContentEvent(task_id=self._task_id, text=item.text)

        if isinstance(item, ToolCallRequest):
            info = ToolCallInfo(call_id=item.call_id, name=item.name, args=item.args)
            self._tool_calls[item.call_id] = info
            self._unanswered[item.call_id] = info
            return ToolCallEvent(
                task_id=self._task_id,
                call_id=item.call_id,
                name=item.name,
                args=item.args,
            )

        if isinstance(item, ToolCallResponse):
            self._unanswered.pop(item.call_id, None)
            return ToolResultEvent(
                task_id=self._task_id,
                call_id=item.call_id,
                result=item.result if item.error is None else item.error,
                success=item.error is None,
            )

        if isinstance(item, WorkerFailure):
            return self.fail(item.message, item.status or REASON_WORKER_ERROR)

        if isinstance(item, WorkerCancelled):
            return self.fail("Task cancelled by user", REASON_USER_CANCELLED)

        if isinstance(item, LoopDetected):
            return self.fail("Loop detected in agent behavior", REASON_LOOP_DETECTED)

        if isinstance(item, OtherItem):
            logger.debug(f"Task {self._task_id}: dropping {item.name} item")
            return None

        raise TypeError(f"Unsupported progress item: {type(item).__name__}")

    def fail(self, message: str, reason: str) -> ErrorEvent:
        """Record a fatal error. Only the first one sticks."""
        event = ErrorEvent(task_id=self._task_id, error=message, reason=reason)
        if self._failure is None:
            self._failure = event
        return event
