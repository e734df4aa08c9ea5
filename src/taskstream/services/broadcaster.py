"""Fan-out of task events to live observers."""

import logging

from taskstream.models.events import TaskEvent
from taskstream.models.task import Observer
from taskstream.services.task_store import TaskStore

logger = logging.getLogger(__name__)


class EventBroadcaster:
    """Delivers each event to every observer attached to its task."""

    def __init__(self, store: TaskStore):
        if store is None:
            raise ValueError("store is required")
        self._store = store

    def attach(self, task_id: str, sink: Observer) -> bool:
        """Register sink for live events. Returns False for unknown task."""
        task = self._store.get(task_id)
        if task is None:
            return False
        task.observers.add(sink)
        logger.debug(
            f"Observer attached to task {task_id} ({len(task.observers)} total)"
        )
        return True

    def detach(self, task_id: str, sink: Observer) -> None:
        """Forget sink. Unknown task or sink is not an error."""
        task = self._store.get(task_id)
        if task is None:
            return
        if sink in task.observers:
            task.observers.discard(sink)
            logger.debug(f"Observer detached from task {task_id}")

    def broadcast(self, task_id: str, event: TaskEvent, sequence: int) -> int:
        """Send event to every attached sink.

        A sink that fails is detached; the others still receive the event.
        Returns the number of sinks that received it.
        """
        task = self._store.get(task_id)
        if task is None:
            return 0

        delivered = 0
        # Snapshot: a failing sink is removed from the live set mid-loop.
        for sink in list(task.observers):
            try:
                sink.send(event, sequence)
                delivered += 1
            except Exception as e:
                logger.warning(
                    f"Dropping observer of task {task_id} after delivery failure: {e}"
                )
                task.observers.discard(sink)
                self._close_quietly(sink)
        return delivered

    def replay(self, task_id: str, sink: Observer, after: int = 0) -> bool:
        """Send the task's logged events after position `after` to sink.

        A sink that fails during replay is closed. Returns False in that
        case or for an unknown task.
        """
        task = self._store.get(task_id)
        if task is None:
            return False

        start = max(0, min(after, len(task.events)))
        for index, event in enumerate(task.events[start:], start=start + 1):
            try:
                sink.send(event, index)
            except Exception as e:
                logger.warning(
                    f"Dropping observer of task {task_id} during replay: {e}"
                )
                self._close_quietly(sink)
                return False
        return True

    def close_all(self, task_id: str) -> int:
        """Close and detach every observer of a task."""
        task = self._store.get(task_id)
        if task is None:
            return 0
        sinks = list(task.observers)
        task.observers.clear()
        for sink in sinks:
            self._close_quietly(sink)
        if sinks:
            logger.debug(f"Closed {len(sinks)} observer(s) of task {task_id}")
        return len(sinks)

    def _close_quietly(self, sink: Observer) -> None:
        try:
            sink.close()
        except Exception as e:
            logger.debug(f"Error closing observer: {e}")
