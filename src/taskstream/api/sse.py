"""Server-Sent Events transport for task observers."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable

from sse_starlette.sse import EventSourceResponse, ServerSentEvent

from taskstream.models.events import TaskEvent

logger = logging.getLogger(__name__)

_CLOSED = object()


class ObserverClosedError(Exception):
    """Raised when delivering to an observer whose stream has ended."""

    pass


class QueueObserver:
    """Observer that buffers events for one SSE connection."""

    def __init__(self, maxsize: int = 0):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def maxsize(self) -> int:
        return self._queue.maxsize

    def send(self, event: TaskEvent, sequence: int) -> None:
        if self._closed:
            raise ObserverClosedError("observer is closed")
        try:
            self._queue.put_nowait((sequence, event))
        except asyncio.QueueFull as e:
            raise ObserverClosedError("observer is not keeping up") from e

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        # Drop the oldest item if full so the close marker always fits.
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(_CLOSED)

    async def events(self) -> AsyncIterator[ServerSentEvent]:
        """Yield queued events as SSE frames until the observer is closed."""
        yield ServerSentEvent(comment="connected")
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            sequence, event = item
            yield ServerSentEvent(
                data=event.to_json(), event=event.type, id=str(sequence)
            )


def parse_last_event_id(value: str | None) -> int:
    """Parse a Last-Event-ID header; anything unusable means replay all."""
    if not value:
        return 0
    try:
        return max(0, int(value.strip()))
    except ValueError:
        return 0


def observer_response(
    observer: QueueObserver,
    on_disconnect: Callable[[], None],
    heartbeat_interval: float,
) -> EventSourceResponse:
    """Wrap an observer in an SSE response with keep-alive pings."""

    async def stream() -> AsyncIterator[ServerSentEvent]:
        try:
            async for frame in observer.events():
                yield frame
        finally:
            on_disconnect()

    return EventSourceResponse(
        stream(),
        ping=int(max(1, heartbeat_interval)),
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
