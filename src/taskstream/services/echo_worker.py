"""Local deterministic worker for demos and tests."""

import asyncio
import uuid
from collections.abc import AsyncIterator

from taskstream.models.progress import (
    ASK_QUESTION_TOOL,
    ContentDelta,
    OtherItem,
    ProgressItem,
    ThoughtItem,
    ToolCallRequest,
)
from taskstream.services.worker import TurnRequest

ASK_PREFIX = "ask:"


class EchoWorker:
    """Echoes each turn's message back as content, word by word.

    A message starting with ``ask:`` makes the turn end with an unanswered
    ask_question call carrying the rest of the message as the question.
    """

    def __init__(self, delay: float = 0.0):
        if delay < 0:
            raise ValueError("delay must be non-negative")
        self._delay = delay

    async def run_turn(self, request: TurnRequest) -> AsyncIterator[ProgressItem]:
        message = request.message.strip()
        yield ThoughtItem(value=f"Turn {request.turn}: {message}")

        if message.lower().startswith(ASK_PREFIX):
            question = message[len(ASK_PREFIX):].strip() or "How should I proceed?"
            yield ToolCallRequest(
                call_id=f"call-{uuid.uuid4().hex[:8]}",
                name=ASK_QUESTION_TOOL,
                args={"question": question},
            )
            return

        words = f"Echo: {message}".split(" ")
        for index, word in enumerate(words):
            if request.token.cancelled:
                return
            await asyncio.sleep(self._delay)
            yield ContentDelta(text=word if index == 0 else f" {word}")

        yield OtherItem(name="finished")

    async def aclose(self) -> None:
        return None
