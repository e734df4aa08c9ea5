"""Boundary between the orchestration engine and an agent worker."""

from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from taskstream.models.progress import ProgressItem
from taskstream.models.state import TaskConfig
from taskstream.models.task import CancellationToken

AskCallback = Callable[[str, str | None], Awaitable[str]]


class WorkerError(Exception):
    """Raised when a worker cannot run or continue a turn."""

    pass


@dataclass(frozen=True)
class TurnRequest:
    """Inputs for one agent turn."""

    task_id: str
    message: str
    config: TaskConfig
    token: CancellationToken
    ask: AskCallback
    turn: int = 1


class AgentWorker(Protocol):
    """Produces the progress items of one turn.

    The returned iterator is lazy, single-pass and should stop soon after
    ``request.token`` is cancelled. ``request.ask`` suspends until the
    caller answers and returns the answer text.
    """

    def run_turn(self, request: TurnRequest) -> AsyncIterator[ProgressItem]: ...

    async def aclose(self) -> None: ...
