# API package

from taskstream.api.app import TaskStreamAPI
from taskstream.api.sse import ObserverClosedError, QueueObserver

__all__ = ["ObserverClosedError", "QueueObserver", "TaskStreamAPI"]
